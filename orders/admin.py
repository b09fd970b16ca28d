from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "variant", "sku", "name", "unit_price", "quantity", "line_total")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "order_code", "status", "payment_method", "customer_name", "grand_total", "created_at")
    list_filter = ("status", "payment_method", "created_at")
    search_fields = ("order_code", "customer_name", "customer_phone", "email")
    date_hierarchy = "created_at"
    raw_id_fields = ("user",)
    inlines = [OrderItemInline]
    # Status changes go through the API so stock stays consistent.
    readonly_fields = (
        "order_code",
        "status",
        "subtotal",
        "discount_total",
        "shipping_fee",
        "grand_total",
        "created_at",
        "updated_at",
    )
