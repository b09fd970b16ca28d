import pytest
from catalog.tests.factories import ProductVariantFactory
from common.exceptions import DomainError, InsufficientStock, NotFound
from django.core.management import call_command
from inventory.models import InventoryMovement
from inventory.services import adjust, audit_low_stock, check_lines, deduct, reserve, restore
from notifications.models import Notification
from rest_framework.exceptions import ValidationError


@pytest.mark.django_db
def test_deduct_decrements_and_records_out_movement():
    v = ProductVariantFactory(stock_qty=10)
    movement = deduct(v.id, 3, note="order", reference="ORD1")
    v.refresh_from_db()
    assert v.stock_qty == 7
    assert movement.movement_type == InventoryMovement.TYPE_OUT
    assert movement.quantity == 3
    assert movement.signed_quantity == -3


@pytest.mark.django_db
def test_deduct_beyond_stock_raises_and_leaves_stock():
    v = ProductVariantFactory(stock_qty=2)
    with pytest.raises(InsufficientStock) as exc:
        deduct(v.id, 3)
    v.refresh_from_db()
    assert v.stock_qty == 2
    assert exc.value.lines == [{"variant_id": v.id, "sku": v.sku, "requested": 3, "available": 2}]
    assert not InventoryMovement.objects.exists()


@pytest.mark.django_db
def test_deduct_rejects_non_positive_quantity():
    v = ProductVariantFactory(stock_qty=2)
    with pytest.raises(DomainError):
        deduct(v.id, 0)


@pytest.mark.django_db
def test_restore_increments_and_records_in_movement():
    v = ProductVariantFactory(stock_qty=1)
    movement = restore(v.id, 4, reason="cancelled")
    v.refresh_from_db()
    assert v.stock_qty == 5
    assert movement.movement_type == InventoryMovement.TYPE_IN
    assert movement.note == "cancelled"


@pytest.mark.django_db
def test_restore_unknown_variant_raises_not_found():
    with pytest.raises(NotFound):
        restore(999999, 1)


@pytest.mark.django_db
def test_reserve_checks_without_decrementing():
    v = ProductVariantFactory(stock_qty=3)
    assert reserve(v.id, 3).pk == v.pk
    with pytest.raises(InsufficientStock):
        reserve(v.id, 4)
    v.refresh_from_db()
    assert v.stock_qty == 3


@pytest.mark.django_db
def test_check_lines_reports_every_short_line():
    a = ProductVariantFactory(stock_qty=1)
    b = ProductVariantFactory(stock_qty=5)
    c = ProductVariantFactory(stock_qty=0)
    with pytest.raises(InsufficientStock) as exc:
        check_lines([(a, 2), (b, 5), (c, 1)])
    assert [line["variant_id"] for line in exc.value.lines] == [a.id, c.id]


@pytest.mark.django_db
def test_adjust_positive_negative_and_zero():
    v = ProductVariantFactory(stock_qty=5)
    adjust(v.id, 5, note="delivery")
    adjust(v.id, -2)
    v.refresh_from_db()
    assert v.stock_qty == 8
    assert InventoryMovement.objects.filter(variant=v).count() == 2

    with pytest.raises(ValidationError):
        adjust(v.id, 0)
    with pytest.raises(InsufficientStock):
        adjust(v.id, -100)


@pytest.mark.django_db
def test_movements_are_append_only():
    v = ProductVariantFactory(stock_qty=5)
    movement = deduct(v.id, 1)
    movement.note = "edited"
    with pytest.raises(TypeError):
        movement.save()
    with pytest.raises(TypeError):
        movement.delete()
    with pytest.raises(TypeError):
        InventoryMovement.objects.all().delete()
    assert InventoryMovement.objects.count() == 1


@pytest.mark.django_db
def test_audit_low_stock_broadcasts_per_variant():
    ProductVariantFactory(stock_qty=0, sku="OUT-1")
    ProductVariantFactory(stock_qty=4, sku="LOW-1")
    ProductVariantFactory(stock_qty=50, sku="OK-1")

    counts = audit_low_stock(threshold=10)

    assert counts == {"low": 1, "out": 1}
    out = Notification.objects.get(type="product_out_of_stock")
    low = Notification.objects.get(type="product_low_stock")
    assert out.user_id is None and "OUT-1" in out.message
    assert low.user_id is None and "LOW-1" in low.message
    assert Notification.objects.count() == 2


@pytest.mark.django_db
def test_audit_low_stock_command_threshold_override(settings):
    settings.INVENTORY_LOW_STOCK_THRESHOLD = 10
    ProductVariantFactory(stock_qty=4)
    ProductVariantFactory(stock_qty=8)

    call_command("audit_low_stock", "--threshold", "5")

    assert Notification.objects.filter(type="product_low_stock").count() == 1
