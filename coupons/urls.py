from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CouponAdminViewSet, CouponApplyView

app_name = "coupons"

router = SimpleRouter()
router.register(r"", CouponAdminViewSet, basename="coupon")

urlpatterns = [
    path("apply/", CouponApplyView.as_view(), name="coupon-apply"),
    path("", include(router.urls)),
]
