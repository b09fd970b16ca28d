from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ShippingMethodAdminViewSet, ShippingMethodListView, ShippingQuoteView

app_name = "shipping"

router = SimpleRouter()
router.register(r"admin/methods", ShippingMethodAdminViewSet, basename="admin-shipping-method")

urlpatterns = [
    path("methods/", ShippingMethodListView.as_view(), name="shipping-method-list"),
    path("calculate/", ShippingQuoteView.as_view(), name="shipping-calculate"),
    path("", include(router.urls)),
]
