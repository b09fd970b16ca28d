"""Admin viewsets for catalog write endpoints.

Endpoints are restricted to staff users and use scoped throttling.
"""

from common.exceptions import ConflictError
from django.db.models import ProtectedError
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import permissions, viewsets

from .admin_serializers import CategoryAdminSerializer, ProductAdminSerializer, ProductVariantAdminSerializer
from .models import Category, Product, ProductVariant


class AdminBaseViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "catalog"

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise ConflictError("Cannot delete: stock history references this record.")


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List categories (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get category (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create category"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update category"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update category"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete category"),
)
class CategoryAdminViewSet(AdminBaseViewSet):
    queryset = Category.objects.all().order_by("sort_order", "name")
    serializer_class = CategoryAdminSerializer


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create product"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update product"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete product"),
)
class ProductAdminViewSet(AdminBaseViewSet):
    queryset = Product.objects.all().prefetch_related("categories").order_by("title")
    serializer_class = ProductAdminSerializer


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List variants (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get variant (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create variant"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update variant"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update variant"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete variant"),
)
class ProductVariantAdminViewSet(AdminBaseViewSet):
    queryset = ProductVariant.objects.select_related("product").order_by("sku")
    serializer_class = ProductVariantAdminSerializer
    filterset_fields = ["product", "is_active"]
