"""Orders API endpoints: checkout and the customer's own orders."""

from common.exceptions import NotFound
from django.db.models import Count
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .serializers import CheckoutSerializer, OrderListSerializer, OrderSerializer
from .services import CUSTOMER_FIELDS, cancel_order, place_order

ORDER_EXAMPLE = {
    "id": 42,
    "order_code": "ORD20240115000042",
    "status": "pending",
    "customer_name": "Nguyen Van A",
    "customer_phone": "0901234567",
    "email": "a@example.com",
    "ship_address_line1": "12 Le Loi",
    "ship_address_line2": "",
    "ship_city": "Ho Chi Minh City",
    "ship_province": "HCM",
    "ship_postal_code": "",
    "ship_country": "VN",
    "note": "",
    "payment_method": "bank_transfer",
    "shipping_method": "standard",
    "coupon_code": "WELCOME10",
    "subtotal": "400000.00",
    "discount_total": "10000.00",
    "shipping_fee": "25000.00",
    "grand_total": "415000.00",
    "items": [
        {
            "id": 7,
            "product_id": 3,
            "variant_id": 10,
            "sku": "TEE-RED-M",
            "name": "Tee",
            "unit_price": "200000.00",
            "quantity": 2,
            "line_total": "400000.00",
        }
    ],
    "payments": [
        {
            "id": 5,
            "method": "bank_transfer",
            "status": "pending",
            "amount": "415000.00",
            "transaction_ref": "",
            "paid_at": None,
        }
    ],
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
}


def order_detail_queryset():
    return Order.objects.select_related("user").prefetch_related("items", "payments")


class CheckoutView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Order Endpoints"],
        summary="Checkout",
        description=(
            "Places an order from the caller's cart (signed-in user, or guest cart via `X-Session-Id`) "
            "or from `items` when given. Stock is re-validated and taken atomically; a shortage returns 400 "
            "listing every short line. An ineligible coupon is ignored (discount 0)."
        ),
        parameters=[
            OpenApiParameter(
                name="X-Session-Id",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Guest session identifier",
                type=str,
            )
        ],
        request=CheckoutSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "customer_name": "Nguyen Van A",
                    "customer_phone": "0901234567",
                    "ship_address_line1": "12 Le Loi",
                    "ship_city": "Ho Chi Minh City",
                    "ship_province": "HCM",
                    "payment_method": "bank_transfer",
                    "shipping_method": "standard",
                    "coupon_code": "WELCOME10",
                },
                request_only=True,
            ),
            OpenApiExample("Created", value=ORDER_EXAMPLE, response_only=True, status_codes=["201"]),
            OpenApiExample(
                "Out of stock",
                value={
                    "success": False,
                    "error": {
                        "message": "Insufficient stock for: TEE-RED-M",
                        "lines": [{"variant_id": 10, "sku": "TEE-RED-M", "requested": 3, "available": 2}],
                    },
                },
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = place_order(
            customer={field: data.get(field, "") for field in CUSTOMER_FIELDS},
            payment_method=data["payment_method"],
            user=request.user,
            session_id=request.headers.get("X-Session-Id"),
            lines=data.get("items"),
            shipping_method=data.get("shipping_method", ""),
            coupon_code=data.get("coupon_code", ""),
        )
        order = order_detail_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderListView(generics.ListAPIView):
    """The signed-in customer's orders, newest first."""

    permission_classes = [IsAuthenticated]
    serializer_class = OrderListSerializer
    throttle_scope = "orders"
    filterset_fields = ["status"]

    def get_queryset(self):
        return (
            Order.objects.filter(user_id=self.request.user.id)
            .annotate(item_count=Count("items"))
            .order_by("-created_at", "-id")
        )

    @extend_schema(tags=["Order Endpoints"], summary="List my orders")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderDetailView(generics.RetrieveAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    throttle_scope = "orders"
    lookup_url_kwarg = "order_id"

    def get_queryset(self):
        return order_detail_queryset().filter(user_id=self.request.user.id)

    @extend_schema(
        tags=["Order Endpoints"],
        summary="Get my order",
        responses={200: OrderSerializer},
        examples=[OpenApiExample("Order", value=ORDER_EXAMPLE)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class OrderByCodeView(APIView):
    """Lookup by order code.

    Staff see any order and owners see their own. Guest orders are found by
    code plus the phone number given at checkout.
    """

    permission_classes = [AllowAny]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Order Endpoints"],
        summary="Find order by code",
        parameters=[
            OpenApiParameter(
                name="phone", required=False, type=str, description="Checkout phone number, for guest orders"
            )
        ],
        responses={200: OrderSerializer},
    )
    def get(self, request, code: str):
        order = order_detail_queryset().filter(order_code=code.strip().upper()).first()
        if order is None or not self._can_view(request, order):
            raise NotFound("Order not found.")
        return Response(OrderSerializer(order).data)

    def _can_view(self, request, order) -> bool:
        user = request.user
        if user.is_authenticated and (user.is_staff or order.user_id == user.id):
            return True
        phone = (request.query_params.get("phone") or "").replace(" ", "")
        return order.user_id is None and bool(phone) and phone == order.customer_phone.replace(" ", "")


class OrderCancelView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Order Endpoints"],
        summary="Cancel my order",
        description="Only pending or confirmed orders can be cancelled; their stock is restored.",
        request=None,
        responses={200: OrderSerializer},
    )
    def post(self, request, order_id: int):
        order = cancel_order(user=request.user, order_id=order_id)
        order = order_detail_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data)
