from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "method", "status", "amount", "transaction_ref", "paid_at", "created_at")
    list_filter = ("method", "status")
    search_fields = ("order__order_code", "transaction_ref")
    raw_id_fields = ("order",)
    readonly_fields = ("created_at", "updated_at")
