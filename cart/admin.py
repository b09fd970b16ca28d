"""Admin registration for cart models.

Carts are shown with their items inline; support staff can clear carts or
fold a guest cart into a customer's cart.
"""

from common.exceptions import DomainError
from django import forms
from django.contrib import admin, messages
from django.contrib.admin.helpers import ActionForm
from django.contrib.auth import get_user_model

from .models import Cart, CartItem
from .services import clear_cart, merge_guest_cart


class CartMergeActionForm(ActionForm):
    user = forms.ModelChoiceField(
        queryset=get_user_model().objects.all(),
        required=False,
        label="Target user for merge (guest carts only)",
    )


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("variant", "quantity", "unit_price", "created_at", "updated_at")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("variant",)


class OwnerTypeFilter(admin.SimpleListFilter):
    title = "owner type"
    parameter_name = "owner_type"

    def lookups(self, request, model_admin):
        return (("user", "User carts"), ("guest", "Guest carts"))

    def queryset(self, request, queryset):
        if self.value() == "user":
            return queryset.filter(user__isnull=False)
        if self.value() == "guest":
            return queryset.filter(user__isnull=True)
        return queryset


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "session_id", "updated_at", "reminded_at", "created_at")
    list_filter = (OwnerTypeFilter,)
    search_fields = ("session_id", "user__username", "user__email")
    ordering = ("-updated_at",)
    readonly_fields = ("created_at", "updated_at", "reminded_at")
    inlines = [CartItemInline]
    raw_id_fields = ("user",)
    list_select_related = ("user",)
    action_form = CartMergeActionForm
    actions = ["action_clear_cart", "action_merge_guest_cart_to_user"]

    @admin.action(description="Clear cart")
    def action_clear_cart(self, request, queryset):
        for cart in queryset:
            clear_cart(cart=cart)
        messages.success(request, f"Cleared {queryset.count()} cart(s).")

    @admin.action(description="Merge guest cart into selected user")
    def action_merge_guest_cart_to_user(self, request, queryset):
        User = get_user_model()
        user_id = request.POST.get("user")
        if not user_id:
            messages.error(request, "Please select a target user in the action form.")
            return
        try:
            target_user = User.objects.get(pk=user_id)
        except User.DoesNotExist:
            messages.error(request, "Selected user not found.")
            return

        merged = skipped = 0
        for cart in queryset:
            if cart.user_id:
                skipped += 1
                continue
            try:
                merge_guest_cart(session_id=cart.session_id, user=target_user)
            except DomainError as exc:
                messages.error(request, f"Cart #{cart.id}: {exc.message}")
                continue
            merged += 1
        if merged:
            owner = target_user.email or target_user.username
            messages.success(request, f"Merged {merged} guest cart(s) into {owner}.")
        if skipped:
            messages.info(request, f"Skipped {skipped} user-bound cart(s); merge applies to guest carts only.")


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "cart", "variant", "quantity", "unit_price", "updated_at")
    search_fields = ("variant__sku", "cart__user__email", "cart__session_id")
    ordering = ("id",)
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("cart", "variant")
