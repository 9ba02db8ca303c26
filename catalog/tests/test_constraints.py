from decimal import Decimal

import pytest
from catalog.models import Product
from catalog.tests.factories import CategoryFactory, ProductFactory, ProductVariantFactory
from django.db import IntegrityError
from django.db.models import ProtectedError


@pytest.mark.django_db
def test_product_price_must_be_positive():
    category = CategoryFactory()
    with pytest.raises(IntegrityError):
        Product.objects.create(name="Free", price=Decimal("0.00"), cost=Decimal("1.00"), category=category)


@pytest.mark.django_db
def test_product_cost_must_be_positive():
    category = CategoryFactory()
    with pytest.raises(IntegrityError):
        Product.objects.create(name="Gift", price=Decimal("1.00"), cost=Decimal("-1.00"), category=category)


@pytest.mark.django_db
def test_category_with_products_is_protected():
    product = ProductFactory()
    with pytest.raises(ProtectedError):
        product.category.delete()


@pytest.mark.django_db
def test_variant_unit_price_adds_adjustment():
    variant = ProductVariantFactory(product__price=Decimal("20.00"), price_adjustment=Decimal("-2.50"))
    assert variant.unit_price == Decimal("17.50")
    assert variant.label == f"Size: {variant.value}"
