from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from shipping.models import ShippingMethod


class ShippingMethodFactory(DjangoModelFactory):
    class Meta:
        model = ShippingMethod

    code = factory.Sequence(lambda n: f"method-{n}")
    name = factory.Sequence(lambda n: f"Method {n}")
    base_fee = Decimal("20000.00")
    fee_per_kg = Decimal("5000.00")
    provinces = factory.LazyFunction(list)
