from common.exceptions import ConflictError
from rest_framework import serializers

from .models import Coupon
from .services import normalize_code


class CouponSerializer(serializers.ModelSerializer):
    times_used = serializers.SerializerMethodField()

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "discount_type",
            "value",
            "min_subtotal",
            "max_discount",
            "start_at",
            "end_at",
            "usage_limit",
            "is_active",
            "times_used",
            "created_at",
        ]
        read_only_fields = ["id", "times_used", "created_at"]
        # Duplicate codes are reported as 409 from validate_code.
        extra_kwargs = {"code": {"validators": []}}

    def get_times_used(self, obj) -> int:
        return obj.redemptions.count()

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Code is required.")
        qs = Coupon.objects.filter(code=code)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ConflictError(f"Coupon code '{code}' already exists.")
        return code

    def validate(self, attrs):
        discount_type = attrs.get("discount_type", getattr(self.instance, "discount_type", None))
        value = attrs.get("value", getattr(self.instance, "value", None))
        if value is not None and value <= 0:
            raise serializers.ValidationError({"value": ["Value must be positive."]})
        if discount_type == Coupon.TYPE_PERCENT and value is not None and value > 100:
            raise serializers.ValidationError({"value": ["Percent coupons cannot exceed 100."]})
        start_at = attrs.get("start_at", getattr(self.instance, "start_at", None))
        end_at = attrs.get("end_at", getattr(self.instance, "end_at", None))
        if start_at and end_at and end_at <= start_at:
            raise serializers.ValidationError({"end_at": ["End must be after start."]})
        return attrs


class CouponApplySerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class CouponApplyResultSerializer(serializers.Serializer):
    code = serializers.CharField()
    discount_type = serializers.CharField()
    value = serializers.DecimalField(max_digits=14, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
