from decimal import Decimal

import pytest
from cart.tests.factories import CartFactory, CartItemFactory, GuestCartFactory
from catalog.tests.factories import ProductVariantFactory
from orders.models import Order
from orders.services import place_order
from orders.tests.factories import customer_details
from rest_framework.test import APIClient
from users.tests.factories import StaffUserFactory, UserFactory


@pytest.fixture
def user_client():
    client = APIClient()
    user = UserFactory()
    client.force_authenticate(user=user)
    client.user = user
    return client


@pytest.fixture
def staff_client():
    client = APIClient()
    client.force_authenticate(user=StaffUserFactory())
    return client


def _place(user=None, qty=1, method="cod", **variant_kwargs):
    variant = ProductVariantFactory(**variant_kwargs)
    return place_order(
        customer=customer_details(),
        payment_method=method,
        user=user,
        lines=[{"variant_id": variant.id, "quantity": qty}],
    )


@pytest.mark.django_db
def test_checkout_from_cart(user_client):
    variant = ProductVariantFactory(price=Decimal("120000.00"), stock_qty=5)
    cart = CartFactory(user=user_client.user)
    CartItemFactory(cart=cart, variant=variant, quantity=2)

    resp = user_client.post(
        "/api/v1/orders/checkout/",
        {**customer_details(), "payment_method": "bank_transfer"},
        format="json",
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "pending"
    assert body["subtotal"] == "240000.00"
    assert body["grand_total"] == "270000.00"
    assert body["items"][0]["sku"] == variant.sku
    assert body["payments"][0]["status"] == "pending"
    assert body["order_code"].startswith("ORD")


@pytest.mark.django_db
def test_checkout_shortage_returns_all_lines(user_client):
    a = ProductVariantFactory(stock_qty=1)
    b = ProductVariantFactory(stock_qty=2)

    resp = user_client.post(
        "/api/v1/orders/checkout/",
        {
            **customer_details(),
            "payment_method": "cod",
            "items": [{"variant_id": a.id, "quantity": 2}, {"variant_id": b.id, "quantity": 5}],
        },
        format="json",
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert {line["sku"] for line in body["error"]["lines"]} == {a.sku, b.sku}
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_guest_checkout_with_session_header():
    cart = GuestCartFactory()
    CartItemFactory(cart=cart, quantity=1)

    resp = APIClient().post(
        "/api/v1/orders/checkout/",
        {**customer_details(), "payment_method": "cod"},
        format="json",
        HTTP_X_SESSION_ID=cart.session_id,
    )

    assert resp.status_code == 201
    assert Order.objects.get().user is None


@pytest.mark.django_db
def test_checkout_validates_input(user_client):
    resp = user_client.post("/api/v1/orders/checkout/", {"payment_method": "cash"}, format="json")
    assert resp.status_code == 400
    fields = resp.json()["error"]["fields"]
    assert "payment_method" in fields
    assert "customer_name" in fields


@pytest.mark.django_db
def test_staff_checkout_is_forbidden(staff_client):
    variant = ProductVariantFactory()
    resp = staff_client.post(
        "/api/v1/orders/checkout/",
        {**customer_details(), "payment_method": "cod", "items": [{"variant_id": variant.id, "quantity": 1}]},
        format="json",
    )
    assert resp.status_code == 403


@pytest.mark.django_db
def test_list_and_detail_show_only_own_orders(user_client):
    mine = _place(user=user_client.user)
    theirs = _place(user=UserFactory())

    resp = user_client.get("/api/v1/orders/")
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [o["order_code"] for o in results] == [mine.order_code]
    assert results[0]["item_count"] == 1

    assert user_client.get(f"/api/v1/orders/{mine.id}/").status_code == 200
    assert user_client.get(f"/api/v1/orders/{theirs.id}/").status_code == 404


@pytest.mark.django_db
def test_orders_list_requires_authentication():
    resp = APIClient().get("/api/v1/orders/")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.django_db
def test_lookup_by_code(user_client, staff_client):
    mine = _place(user=user_client.user)
    theirs = _place(user=UserFactory())

    assert user_client.get(f"/api/v1/orders/by-code/{mine.order_code.lower()}/").status_code == 200
    assert user_client.get(f"/api/v1/orders/by-code/{theirs.order_code}/").status_code == 404
    assert staff_client.get(f"/api/v1/orders/by-code/{theirs.order_code}/").status_code == 200


@pytest.mark.django_db
def test_guest_lookup_needs_matching_phone():
    order = _place(user=None)
    client = APIClient()
    assert client.get(f"/api/v1/orders/by-code/{order.order_code}/").status_code == 404
    assert client.get(f"/api/v1/orders/by-code/{order.order_code}/", {"phone": "0000000000"}).status_code == 404
    resp = client.get(f"/api/v1/orders/by-code/{order.order_code}/", {"phone": "0901234567"})
    assert resp.status_code == 200
    assert resp.json()["id"] == order.id


@pytest.mark.django_db
def test_cancel_endpoint(user_client):
    order = _place(user=user_client.user, qty=2, stock_qty=5)
    resp = user_client.post(f"/api/v1/orders/{order.id}/cancel/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    variant = order.items.get().variant
    variant.refresh_from_db()
    assert variant.stock_qty == 5


@pytest.mark.django_db
def test_admin_list_filters(staff_client):
    pending = _place(user=UserFactory())
    shipped = _place(user=UserFactory())
    Order.objects.filter(pk=shipped.pk).update(status=Order.STATUS_SHIPPED)

    resp = staff_client.get("/api/v1/admin/orders/", {"status": "shipped"})
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()["results"]] == [shipped.id]

    resp = staff_client.get("/api/v1/admin/orders/", {"code": pending.order_code})
    assert [o["id"] for o in resp.json()["results"]] == [pending.id]

    resp = staff_client.get("/api/v1/admin/orders/", {"created_after": "2999-01-01T00:00:00Z"})
    assert resp.json()["results"] == []


@pytest.mark.django_db
def test_admin_endpoints_require_staff(user_client):
    assert user_client.get("/api/v1/admin/orders/").status_code == 403


@pytest.mark.django_db
def test_admin_status_update(staff_client):
    order = _place(user=UserFactory())

    resp = staff_client.patch(f"/api/v1/admin/orders/{order.id}/status/", {"status": "processing"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "processing"

    resp = staff_client.patch(f"/api/v1/admin/orders/{order.id}/status/", {"status": "pending"}, format="json")
    assert resp.status_code == 409
    assert resp.json()["success"] is False

    resp = staff_client.patch(f"/api/v1/admin/orders/{order.id}/status/", {"status": "lost"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_admin_detail(staff_client):
    order = _place(user=UserFactory())
    resp = staff_client.get(f"/api/v1/admin/orders/{order.id}/")
    assert resp.status_code == 200
    assert resp.json()["order_code"] == order.order_code
