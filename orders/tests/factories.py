from decimal import Decimal

import factory
from common.choices import PaymentMethod
from factory.django import DjangoModelFactory
from orders.models import Order, OrderItem
from payments.models import Payment


class OrderFactory(DjangoModelFactory):
    class Meta:
        model = Order

    user = factory.SubFactory("users.tests.factories.UserFactory")
    order_code = factory.Sequence(lambda n: f"ORD20240101{n:06d}")
    customer_name = factory.Faker("name")
    customer_phone = "0901234567"
    ship_address_line1 = "12 Le Loi"
    ship_city = "Ho Chi Minh City"
    payment_method = PaymentMethod.COD
    subtotal = Decimal("100000.00")
    shipping_fee = Decimal("30000.00")
    grand_total = Decimal("130000.00")


class OrderItemFactory(DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    variant = factory.SubFactory("catalog.tests.factories.ProductVariantFactory")
    product = factory.SelfAttribute("variant.product")
    sku = factory.SelfAttribute("variant.sku")
    name = factory.SelfAttribute("variant.product.title")
    unit_price = Decimal("50000.00")
    quantity = 2
    line_total = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)


class PaymentFactory(DjangoModelFactory):
    class Meta:
        model = Payment

    order = factory.SubFactory(OrderFactory)
    method = factory.SelfAttribute("order.payment_method")
    amount = factory.SelfAttribute("order.grand_total")


def customer_details(**overrides) -> dict:
    details = {
        "customer_name": "Nguyen Van A",
        "customer_phone": "0901234567",
        "email": "buyer@example.com",
        "ship_address_line1": "12 Le Loi",
        "ship_city": "Ho Chi Minh City",
        "ship_province": "HCM",
    }
    details.update(overrides)
    return details
