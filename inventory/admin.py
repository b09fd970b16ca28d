"""Admin registration for the inventory ledger (read-only)."""

from django.contrib import admin

from .models import InventoryMovement


@admin.register(InventoryMovement)
class InventoryMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "variant", "movement_type", "quantity", "note", "reference", "order", "created_at")
    list_filter = ("movement_type",)
    search_fields = ("variant__sku", "reference", "order__order_code")
    raw_id_fields = ("variant", "order")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
