import pytest
from catalog.models import ProductVariant
from catalog.tests.factories import ProductVariantFactory
from django.db import IntegrityError, transaction
from orders.tests.factories import OrderItemFactory


@pytest.mark.django_db
def test_stock_can_never_go_negative():
    v = ProductVariantFactory(stock_qty=1)
    with pytest.raises(IntegrityError), transaction.atomic():
        ProductVariant.objects.filter(pk=v.pk).update(stock_qty=-1)
    v.refresh_from_db()
    assert v.stock_qty == 1


@pytest.mark.django_db
def test_sku_is_unique():
    ProductVariantFactory(sku="DUP-1")
    with pytest.raises(IntegrityError):
        ProductVariantFactory(sku="DUP-1")


@pytest.mark.django_db
def test_order_items_are_immutable():
    item = OrderItemFactory()
    item.quantity = 99
    with pytest.raises(TypeError):
        item.save()
