from decimal import Decimal

from common.exceptions import NotFound
from common.money import round_whole
from rest_framework.exceptions import ValidationError

from .models import ShippingMethod


def get_active_method(code: str) -> ShippingMethod:
    method = ShippingMethod.objects.filter(code=(code or "").strip().lower(), is_active=True).first()
    if method is None:
        raise NotFound("Shipping method is not available.")
    return method


def quote(method_code: str, weight: int, province: str | None = None) -> dict:
    """Fee for a parcel of ``weight`` grams sent with ``method_code`` to ``province``."""

    method = get_active_method(method_code)
    if not method.serves(province):
        raise ValidationError({"province": ["This shipping method does not deliver to your province."]})
    weight_kg = Decimal(max(int(weight or 0), 0)) / Decimal(1000)
    fee = round_whole(method.base_fee + weight_kg * method.fee_per_kg)
    return {
        "method_code": method.code,
        "method_name": method.name,
        "fee": fee,
        "min_days": method.min_days,
        "max_days": method.max_days,
    }
