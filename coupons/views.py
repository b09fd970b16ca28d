"""Coupon endpoints: public preview and staff management."""

from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Coupon
from .serializers import CouponApplyResultSerializer, CouponApplySerializer, CouponSerializer
from .services import delete_coupon, preview


class CouponApplyView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Coupon Endpoints"],
        summary="Preview a coupon",
        description="Returns the discount a code would give on `subtotal`. Nothing is reserved; checkout re-checks.",
        request=CouponApplySerializer,
        responses={200: CouponApplyResultSerializer},
        examples=[OpenApiExample("Apply", value={"code": "SALE10", "subtotal": "500000.00"}, request_only=True)],
    )
    def post(self, request):
        serializer = CouponApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = preview(serializer.validated_data["code"], serializer.validated_data["subtotal"])
        return Response(CouponApplyResultSerializer(result).data, status=status.HTTP_200_OK)


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List coupons"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get coupon"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create coupon"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update coupon"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update coupon"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete coupon"),
)
class CouponAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CouponSerializer
    queryset = Coupon.objects.all().order_by("-created_at")
    search_fields = ["code"]
    filterset_fields = ["is_active", "discount_type"]

    def perform_destroy(self, instance):
        delete_coupon(instance)
