import pytest
from branches.models import Branch
from catalog.models import Product
from django.core.management import call_command
from django.core.management.base import CommandError
from inventory.models import StockItem
from users.models import User


@pytest.mark.django_db
def test_seed_pos_is_idempotent():
    call_command("seed_pos")
    call_command("seed_pos")

    branch = Branch.objects.get()
    admin = User.objects.get(email="admin@example.com")
    assert branch.name == "Main"
    assert admin.is_pos_admin
    assert admin.branch_id == branch.id
    assert admin.check_password("secret123")


@pytest.mark.django_db
def test_seed_pos_demo_provisions_stock():
    call_command("seed_pos", "--demo", "--stock", "7")
    call_command("seed_pos", "--demo")

    assert Product.objects.count() == 3
    shirt = Product.objects.get(name="T-Shirt")
    assert shirt.variants.count() == 2
    assert set(StockItem.objects.values_list("stock", flat=True)) == {7}


@pytest.mark.django_db
def test_seed_pos_requires_admin_credentials(settings):
    settings.POS_ADMIN_EMAIL = ""
    with pytest.raises(CommandError):
        call_command("seed_pos")
