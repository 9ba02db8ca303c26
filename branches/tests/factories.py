import factory
from branches.models import Branch
from factory.django import DjangoModelFactory


class BranchFactory(DjangoModelFactory):
    class Meta:
        model = Branch
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Branch {n}")
    address = factory.Faker("street_address")
