from common.exceptions import ConflictError
from rest_framework import serializers

from .models import ShippingMethod


class ShippingMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingMethod
        fields = [
            "id",
            "code",
            "name",
            "description",
            "base_fee",
            "fee_per_kg",
            "min_days",
            "max_days",
            "provinces",
            "is_active",
            "sort_order",
        ]
        extra_kwargs = {"code": {"validators": []}}

    def validate_code(self, value):
        code = value.strip().lower()
        qs = ShippingMethod.objects.filter(code=code)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise ConflictError(f"Shipping method code '{code}' already exists.")
        return code

    def validate_provinces(self, value):
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise serializers.ValidationError("Provide a list of province names.")
        return value

    def validate(self, attrs):
        min_days = attrs.get("min_days", getattr(self.instance, "min_days", 1))
        max_days = attrs.get("max_days", getattr(self.instance, "max_days", 3))
        if min_days > max_days:
            raise serializers.ValidationError({"max_days": ["Must be greater than or equal to min_days."]})
        return attrs


class ShippingQuoteRequestSerializer(serializers.Serializer):
    method_code = serializers.CharField(max_length=40)
    weight = serializers.IntegerField(min_value=0, default=0, help_text="Parcel weight in grams")
    province = serializers.CharField(max_length=120, required=False, allow_blank=True)


class ShippingQuoteSerializer(serializers.Serializer):
    method_code = serializers.CharField()
    method_name = serializers.CharField()
    fee = serializers.DecimalField(max_digits=14, decimal_places=2)
    min_days = serializers.IntegerField()
    max_days = serializers.IntegerField()
