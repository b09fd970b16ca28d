"""DRF serializers for Orders.

Orders are read back exactly as they were priced at checkout; every money
field is a stored snapshot, never recomputed from current catalogue prices.
"""

from common.choices import OrderStatus, PaymentMethod
from payments.models import Payment
from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    variant_id = serializers.IntegerField(read_only=True, allow_null=True)
    product_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "variant_id", "sku", "name", "unit_price", "quantity", "line_total"]
        read_only_fields = fields


class PaymentSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "method", "status", "amount", "transaction_ref", "paid_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    payments = PaymentSummarySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_code",
            "status",
            "customer_name",
            "customer_phone",
            "email",
            "ship_address_line1",
            "ship_address_line2",
            "ship_city",
            "ship_province",
            "ship_postal_code",
            "ship_country",
            "note",
            "payment_method",
            "shipping_method",
            "coupon_code",
            "subtotal",
            "discount_total",
            "shipping_fee",
            "grand_total",
            "items",
            "payments",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_code",
            "status",
            "customer_name",
            "payment_method",
            "grand_total",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields


class CheckoutLineSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class CheckoutSerializer(serializers.Serializer):
    """Checkout input.

    Without ``items`` the caller's cart is ordered; with ``items`` the given
    lines are ordered directly and the cart is left alone.
    """

    customer_name = serializers.CharField(max_length=120)
    customer_phone = serializers.RegexField(r"^\+?[0-9 ]{8,20}$", max_length=20, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    ship_address_line1 = serializers.CharField(max_length=255)
    ship_address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    ship_city = serializers.CharField(max_length=120)
    ship_province = serializers.CharField(max_length=120, required=False, allow_blank=True)
    ship_postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    ship_country = serializers.CharField(max_length=2, required=False, default="VN")
    note = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    shipping_method = serializers.CharField(max_length=40, required=False, allow_blank=True)
    coupon_code = serializers.CharField(max_length=32, required=False, allow_blank=True)
    items = CheckoutLineSerializer(many=True, required=False)

    def validate_ship_country(self, value):
        return value.upper()

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
