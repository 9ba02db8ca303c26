import factory
from branches.tests.factories import BranchFactory
from catalog.tests.factories import ProductFactory
from factory.django import DjangoModelFactory
from inventory.models import StockItem


class ProductStockFactory(DjangoModelFactory):
    class Meta:
        model = StockItem

    product = factory.SubFactory(ProductFactory)
    variant = None
    branch = factory.SubFactory(BranchFactory)
    stock = 10
