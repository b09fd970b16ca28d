import factory
from cart.models import Cart, CartItem
from factory.django import DjangoModelFactory


class CartFactory(DjangoModelFactory):
    class Meta:
        model = Cart

    user = factory.SubFactory("users.tests.factories.UserFactory")


class GuestCartFactory(DjangoModelFactory):
    class Meta:
        model = Cart

    user = None
    session_id = factory.Sequence(lambda n: f"guest-session-{n}")


class CartItemFactory(DjangoModelFactory):
    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    variant = factory.SubFactory("catalog.tests.factories.ProductVariantFactory")
    quantity = 1
    unit_price = factory.SelfAttribute("variant.price")
