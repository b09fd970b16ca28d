from django.contrib import admin

from .models import Coupon, CouponRedemption


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_type", "value", "min_subtotal", "usage_limit", "is_active", "start_at", "end_at")
    list_filter = ("discount_type", "is_active")
    search_fields = ("code",)


@admin.register(CouponRedemption)
class CouponRedemptionAdmin(admin.ModelAdmin):
    list_display = ("id", "coupon", "order", "user", "discount_amount", "created_at")
    search_fields = ("coupon__code", "order__order_code", "user__email")
    raw_id_fields = ("coupon", "order", "user")
    readonly_fields = ("created_at",)
