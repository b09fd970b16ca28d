from datetime import timedelta
from decimal import Decimal

import pytest
from coupons.models import Coupon
from coupons.services import CouponRejected, compute_discount, discount_for_checkout, evaluate, redeem
from coupons.tests.factories import CouponFactory
from django.utils import timezone
from orders.tests.factories import OrderFactory
from rest_framework.test import APIClient
from users.tests.factories import StaffUserFactory


@pytest.mark.django_db
def test_percent_discount_is_capped_by_max_discount():
    coupon = CouponFactory(discount_type=Coupon.TYPE_PERCENT, value=Decimal("20"), max_discount=Decimal("50000"))
    assert compute_discount(coupon, Decimal("100000")) == Decimal("20000.00")
    assert compute_discount(coupon, Decimal("1000000")) == Decimal("50000.00")


@pytest.mark.django_db
def test_fixed_discount_never_exceeds_subtotal():
    coupon = CouponFactory(value=Decimal("90000"))
    assert compute_discount(coupon, Decimal("40000")) == Decimal("40000.00")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides",
    [
        {"is_active": False},
        {"start_at": timezone.now() + timedelta(days=1)},
        {"end_at": timezone.now() - timedelta(days=1)},
        {"min_subtotal": Decimal("500000")},
    ],
)
def test_ineligible_coupons_are_rejected(overrides):
    coupon = CouponFactory(**overrides)
    with pytest.raises(CouponRejected):
        evaluate(coupon, Decimal("100000"))


@pytest.mark.django_db
def test_usage_limit_counts_redemptions():
    coupon = CouponFactory(usage_limit=1)
    assert evaluate(coupon, Decimal("100000")) == Decimal("10000.00")
    redeem(coupon=coupon, order=OrderFactory(), discount_amount=Decimal("10000.00"))
    with pytest.raises(CouponRejected):
        evaluate(coupon, Decimal("100000"))


@pytest.mark.django_db
def test_discount_for_checkout_falls_back_to_zero():
    CouponFactory(code="BIG", min_subtotal=Decimal("1000000"))
    assert discount_for_checkout("big", Decimal("100000")) == (None, Decimal("0.00"))
    assert discount_for_checkout("NOPE", Decimal("100000")) == (None, Decimal("0.00"))
    assert discount_for_checkout("", Decimal("100000")) == (None, Decimal("0.00"))


@pytest.mark.django_db
def test_discount_for_checkout_returns_coupon_when_eligible():
    coupon = CouponFactory(code="TENK")
    assert discount_for_checkout(" tenk ", Decimal("100000")) == (coupon, Decimal("10000.00"))


@pytest.mark.django_db
def test_apply_endpoint_reports_reason():
    CouponFactory(code="MIN", min_subtotal=Decimal("500000"))
    client = APIClient()

    ok = client.post("/api/v1/coupons/apply/", {"code": "min", "subtotal": "600000"}, format="json")
    assert ok.status_code == 200
    assert ok.json()["discount_amount"] == "10000.00"

    low = client.post("/api/v1/coupons/apply/", {"code": "MIN", "subtotal": "100000"}, format="json")
    assert low.status_code == 400
    assert "Minimum order subtotal" in low.json()["error"]["message"]

    missing = client.post("/api/v1/coupons/apply/", {"code": "NOPE", "subtotal": "100"}, format="json")
    assert missing.status_code == 404


@pytest.mark.django_db
def test_admin_create_duplicate_code_conflicts():
    client = APIClient()
    client.force_authenticate(user=StaffUserFactory())
    payload = {"code": "new10", "discount_type": "percent", "value": "10"}

    first = client.post("/api/v1/coupons/", payload, format="json")
    assert first.status_code == 201
    assert first.json()["code"] == "NEW10"

    dup = client.post("/api/v1/coupons/", payload, format="json")
    assert dup.status_code == 409
    assert dup.json()["success"] is False


@pytest.mark.django_db
def test_admin_rejects_percent_over_100_and_anonymous():
    payload = {"code": "X", "discount_type": "percent", "value": "150"}
    assert APIClient().post("/api/v1/coupons/", payload, format="json").status_code == 401

    client = APIClient()
    client.force_authenticate(user=StaffUserFactory())
    resp = client.post("/api/v1/coupons/", payload, format="json")
    assert resp.status_code == 400
    assert "value" in resp.json()["error"]["fields"]


@pytest.mark.django_db
def test_admin_cannot_delete_used_coupon():
    coupon = CouponFactory()
    redeem(coupon=coupon, order=OrderFactory(), discount_amount=Decimal("1.00"))
    client = APIClient()
    client.force_authenticate(user=StaffUserFactory())

    resp = client.delete(f"/api/v1/coupons/{coupon.id}/")
    assert resp.status_code == 409
    assert Coupon.objects.filter(pk=coupon.pk).exists()
