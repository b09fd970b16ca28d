"""URL routes for the orders app (v1)."""

from django.urls import path

from .views import CheckoutView, OrderByCodeView, OrderCancelView, OrderDetailView, OrderListView

urlpatterns = [
    path("", OrderListView.as_view(), name="order-list"),
    path("checkout/", CheckoutView.as_view(), name="order-checkout"),
    path("by-code/<str:code>/", OrderByCodeView.as_view(), name="order-by-code"),
    path("<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<int:order_id>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
]
