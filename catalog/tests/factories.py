from decimal import Decimal

import factory
from catalog.models import Category, Product, ProductVariant
from factory import Faker
from factory.django import DjangoModelFactory


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category

    name = Faker("word")
    color = Faker("hex_color")


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    name = Faker("sentence", nb_words=3)
    price = Decimal("20.00")
    cost = Decimal("8.00")
    barcode = factory.Faker("ean")
    color = Faker("hex_color")
    category = factory.SubFactory(CategoryFactory)
    active = True


class ProductVariantFactory(DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    name = "Size"
    value = factory.Sequence(lambda n: f"S{n}")
    price_adjustment = Decimal("0.00")
