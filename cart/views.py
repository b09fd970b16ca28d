"""DRF views for cart operations.

Signed-in callers act on their own cart; anonymous callers identify a guest
cart with the ``X-Session-Id`` header.
"""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import AddItemSerializer, CartReadSerializer, MergeCartSerializer, UpdateItemQuantitySerializer
from .services import add_item, clear_cart, merge_guest_cart, remove_item, resolve_cart, update_item_quantity

SESSION_HEADER = OpenApiParameter(
    name="X-Session-Id",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Guest session identifier; ignored for signed-in users",
    type=str,
)


class CartBaseView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    def get_cart(self):
        return resolve_cart(user=self.request.user, session_id=self.request.headers.get("X-Session-Id"))

    def cart_response(self, cart, code=status.HTTP_200_OK):
        cart.refresh_from_db()
        return Response(CartReadSerializer.from_cart(cart=cart).data, status=code)


class CartDetailView(CartBaseView):
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer},
        examples=[
            OpenApiExample(
                "Cart",
                value={
                    "id": 1,
                    "session_id": None,
                    "items": [
                        {
                            "id": 10,
                            "variant_id": 100,
                            "sku": "TEE-RED-M",
                            "title": "Tee",
                            "quantity": 2,
                            "unit_price": "150000.00",
                            "stock_qty": 12,
                            "line_total": "300000.00",
                        }
                    ],
                    "item_count": 2,
                    "subtotal": "300000.00",
                },
                response_only=True,
            )
        ],
    )
    def get(self, request):
        return self.cart_response(self.get_cart())

    @extend_schema(tags=["Cart Endpoints"], summary="Clear cart", parameters=[SESSION_HEADER])
    def delete(self, request):
        cart = self.get_cart()
        clear_cart(cart=cart)
        return self.cart_response(cart)


class CartItemsView(CartBaseView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds the quantity to any existing line for the variant. Rejected when stock is short.",
        request=AddItemSerializer,
        parameters=[SESSION_HEADER],
        responses={201: CartReadSerializer},
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.get_cart()
        add_item(cart=cart, **serializer.validated_data)
        return self.cart_response(cart, code=status.HTTP_201_CREATED)


class CartItemDetailView(CartBaseView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        request=UpdateItemQuantitySerializer,
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer},
    )
    def patch(self, request, item_id: int):
        serializer = UpdateItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = self.get_cart()
        update_item_quantity(cart=cart, item_id=item_id, quantity=serializer.validated_data["quantity"])
        return self.cart_response(cart)

    @extend_schema(tags=["Cart Endpoints"], summary="Remove cart item", parameters=[SESSION_HEADER])
    def delete(self, request, item_id: int):
        cart = self.get_cart()
        remove_item(cart=cart, item_id=item_id)
        return self.cart_response(cart)


class CartMergeView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Merge guest cart",
        description="Moves a guest session cart into the signed-in user's cart.",
        request=MergeCartSerializer,
        responses={200: CartReadSerializer},
    )
    def post(self, request):
        serializer = MergeCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = merge_guest_cart(session_id=serializer.validated_data["session_id"], user=request.user)
        return Response(CartReadSerializer.from_cart(cart=cart).data, status=status.HTTP_200_OK)
