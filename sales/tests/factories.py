from decimal import Decimal

import factory
from common.choices import PaymentMethod
from factory.django import DjangoModelFactory
from sales.models import Sale
from users.tests.factories import UserFactory


class SaleFactory(DjangoModelFactory):
    class Meta:
        model = Sale

    user = factory.SubFactory(UserFactory)
    branch = factory.LazyAttribute(lambda o: o.user.branch)
    total = Decimal("10.00")
    payment_method = PaymentMethod.CARD
