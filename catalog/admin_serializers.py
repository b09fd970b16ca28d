"""Admin serializers for catalog write endpoints (staff only)."""

from rest_framework import serializers

from .models import Category, Product, ProductVariant


class CategoryAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "parent", "is_active", "sort_order"]


class ProductAdminSerializer(serializers.ModelSerializer):
    categories = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all(), many=True, required=False)

    class Meta:
        model = Product
        fields = ["id", "title", "slug", "description", "status", "categories"]


class ProductVariantAdminSerializer(serializers.ModelSerializer):
    """Variant CRUD; ``stock_qty`` is read-only and changed via inventory adjustments."""

    class Meta:
        model = ProductVariant
        fields = ["id", "product", "sku", "price", "stock_qty", "weight", "is_active"]
        read_only_fields = ["stock_qty"]
