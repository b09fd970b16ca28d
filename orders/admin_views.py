"""Admin order endpoints: filtered listing, detail and status updates."""

from django.db.models import Count
from django_filters import rest_framework as filters
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import generics
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .serializers import OrderListSerializer, OrderSerializer, OrderStatusUpdateSerializer
from .services import change_status
from .views import order_detail_queryset


class AdminOrderFilterSet(filters.FilterSet):
    code = filters.CharFilter(field_name="order_code", lookup_expr="icontains")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")
    phone = filters.CharFilter(field_name="customer_phone", lookup_expr="icontains")

    class Meta:
        model = Order
        fields = ["status", "payment_method", "code", "created_after", "created_before", "phone"]


class AdminOrderListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = OrderListSerializer
    throttle_scope = "orders"
    filterset_class = AdminOrderFilterSet
    ordering_fields = ["created_at", "grand_total"]
    search_fields = ["order_code", "customer_name", "customer_phone", "email"]

    def get_queryset(self):
        return Order.objects.annotate(item_count=Count("items")).order_by("-created_at", "-id")

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="List orders (admin)",
        description="Filters: `status`, `payment_method`, `code`, `phone`, `created_after`, `created_before` (ISO).",
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAdminUser]
    serializer_class = OrderSerializer
    throttle_scope = "orders"
    lookup_url_kwarg = "order_id"

    def get_queryset(self):
        return order_detail_queryset()

    @extend_schema(tags=["Admin Endpoints"], summary="Get order (admin)")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderStatusView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Update order status",
        description=(
            "Moves the order to `status`. Illegal moves return 409 unless transition checks are disabled. "
            "Cancelling or refunding restores stock; moving to `paid` marks pending payments paid."
        ),
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
        examples=[OpenApiExample("Ship", value={"status": "shipped"}, request_only=True)],
    )
    def patch(self, request, order_id: int):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = change_status(order_id, serializer.validated_data["status"], actor=request.user)
        order = order_detail_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data)
