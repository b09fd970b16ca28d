from decimal import Decimal

import pytest
from catalog.models import Category, Product, ProductVariant
from catalog.tests.factories import CategoryFactory, ProductFactory, ProductVariantFactory
from inventory.services import deduct
from rest_framework.test import APIClient
from users.tests.factories import StaffUserFactory, UserFactory


@pytest.fixture
def staff_client():
    client = APIClient()
    client.force_authenticate(user=StaffUserFactory())
    return client


@pytest.mark.django_db
def test_public_list_shows_published_products_with_active_variants():
    shirts = CategoryFactory(slug="shirts")
    product = ProductFactory(title="Linen Shirt")
    product.categories.add(shirts)
    ProductVariantFactory(product=product, sku="LIN-M", stock_qty=4)
    ProductVariantFactory(product=product, sku="LIN-X", is_active=False)
    ProductFactory(title="Hidden", status=Product.STATUS_DRAFT)

    resp = APIClient().get("/api/v1/catalog/products/")

    assert resp.status_code == 200
    results = resp.json()["results"]
    assert [p["title"] for p in results] == ["Linen Shirt"]
    assert [(v["sku"], v["stock_qty"], v["in_stock"]) for v in results[0]["variants"]] == [("LIN-M", 4, True)]


@pytest.mark.django_db
def test_public_list_filters_by_category_and_search():
    shirts = CategoryFactory(slug="shirts")
    shirt = ProductFactory(title="Oxford Shirt")
    shirt.categories.add(shirts)
    cap = ProductFactory(title="Cap")
    ProductVariantFactory(product=cap, sku="CAP-RED")

    client = APIClient()
    assert [p["id"] for p in client.get("/api/v1/catalog/products/", {"category": "shirts"}).json()["results"]] == [
        shirt.id
    ]
    assert [p["id"] for p in client.get("/api/v1/catalog/products/", {"q": "cap-red"}).json()["results"]] == [cap.id]


@pytest.mark.django_db
def test_public_detail_hides_drafts():
    published = ProductFactory(slug="tee")
    ProductFactory(slug="draft-tee", status=Product.STATUS_DRAFT)

    client = APIClient()
    assert client.get("/api/v1/catalog/products/tee/").json()["id"] == published.id
    resp = client.get("/api/v1/catalog/products/draft-tee/")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


@pytest.mark.django_db
def test_admin_crud_requires_staff():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    assert client.get("/api/v1/admin/catalog/products/").status_code == 403


@pytest.mark.django_db
def test_admin_creates_product_and_variant(staff_client):
    category = CategoryFactory()
    resp = staff_client.post(
        "/api/v1/admin/catalog/products/",
        {"title": "Denim Jacket", "slug": "denim-jacket", "status": "published", "categories": [category.id]},
        format="json",
    )
    assert resp.status_code == 201
    product_id = resp.json()["id"]

    resp = staff_client.post(
        "/api/v1/admin/catalog/variants/",
        {"product": product_id, "sku": "DJ-L", "price": "650000.00", "weight": 900, "stock_qty": 50},
        format="json",
    )
    assert resp.status_code == 201
    variant = ProductVariant.objects.get(sku="DJ-L")
    assert variant.price == Decimal("650000.00")
    # Stock only moves through the inventory ledger.
    assert variant.stock_qty == 0


@pytest.mark.django_db
def test_admin_cannot_overwrite_stock(staff_client):
    variant = ProductVariantFactory(stock_qty=7)
    resp = staff_client.patch(
        f"/api/v1/admin/catalog/variants/{variant.id}/", {"stock_qty": 999, "price": "1.00"}, format="json"
    )
    assert resp.status_code == 200
    variant.refresh_from_db()
    assert variant.stock_qty == 7
    assert variant.price == Decimal("1.00")


@pytest.mark.django_db
def test_admin_variant_filter(staff_client):
    variant = ProductVariantFactory()
    ProductVariantFactory()
    resp = staff_client.get("/api/v1/admin/catalog/variants/", {"product": variant.product_id})
    assert [v["id"] for v in resp.json()["results"]] == [variant.id]


@pytest.mark.django_db
def test_deleting_variant_with_stock_history_conflicts(staff_client):
    variant = ProductVariantFactory(stock_qty=5)
    deduct(variant.id, 1, reference="TEST")

    resp = staff_client.delete(f"/api/v1/admin/catalog/variants/{variant.id}/")

    assert resp.status_code == 409
    assert resp.json()["success"] is False
    assert ProductVariant.objects.filter(pk=variant.pk).exists()


@pytest.mark.django_db
def test_deleting_unused_category(staff_client):
    category = CategoryFactory()
    assert staff_client.delete(f"/api/v1/admin/catalog/categories/{category.id}/").status_code == 204
    assert not Category.objects.filter(pk=category.pk).exists()
