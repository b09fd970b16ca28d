from django.contrib import admin

from .models import ShippingMethod


@admin.register(ShippingMethod)
class ShippingMethodAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "base_fee", "fee_per_kg", "min_days", "max_days", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("code", "name")
