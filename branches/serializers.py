from rest_framework import serializers

from .models import Branch


class BranchUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.EmailField()
    role = serializers.CharField()


class BranchSerializer(serializers.ModelSerializer):
    """Branch with the staff assigned to it."""

    users = BranchUserSerializer(many=True, read_only=True)

    class Meta:
        model = Branch
        fields = ["id", "name", "address", "users", "created_at"]
        read_only_fields = ["id", "users", "created_at"]
        extra_kwargs = {"name": {"validators": []}}
