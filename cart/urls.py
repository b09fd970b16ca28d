"""Cart URL routes (v1)."""

from django.urls import path

from .views import CartDetailView, CartItemDetailView, CartItemsView, CartMergeView

app_name = "cart"

urlpatterns = [
    path("", CartDetailView.as_view(), name="cart-detail"),
    path("items/", CartItemsView.as_view(), name="cart-items"),
    path("items/<int:item_id>/", CartItemDetailView.as_view(), name="cart-item-detail"),
    path("merge/", CartMergeView.as_view(), name="cart-merge"),
]
