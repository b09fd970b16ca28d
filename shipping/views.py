"""Shipping endpoints: public method list and fee quote, staff management."""

from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import generics, permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import ShippingMethod
from .serializers import ShippingMethodSerializer, ShippingQuoteRequestSerializer, ShippingQuoteSerializer
from .services import quote


class ShippingMethodListView(generics.ListAPIView):
    permission_classes = [permissions.AllowAny]
    serializer_class = ShippingMethodSerializer
    pagination_class = None
    filter_backends = []
    throttle_scope = "catalog"

    @extend_schema(tags=["Shipping Endpoints"], summary="List active shipping methods")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return ShippingMethod.objects.filter(is_active=True).order_by("sort_order", "name")


class ShippingQuoteView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_scope = "catalog"

    @extend_schema(
        tags=["Shipping Endpoints"],
        summary="Calculate shipping fee",
        description="fee = base_fee + weight_kg * fee_per_kg, rounded to whole currency units.",
        request=ShippingQuoteRequestSerializer,
        responses={200: ShippingQuoteSerializer},
        examples=[
            OpenApiExample(
                "Quote", value={"method_code": "standard", "weight": 1500, "province": "Ha Noi"}, request_only=True
            )
        ],
    )
    def post(self, request):
        serializer = ShippingQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = quote(data["method_code"], data["weight"], data.get("province") or None)
        return Response(ShippingQuoteSerializer(result).data, status=status.HTTP_200_OK)


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List shipping methods (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get shipping method (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create shipping method"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update shipping method"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update shipping method"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete shipping method"),
)
class ShippingMethodAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = ShippingMethodSerializer
    queryset = ShippingMethod.objects.all().order_by("sort_order", "name")
