from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce ``value`` to a two-place Decimal (half-up)."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value) -> Decimal:
    """Round to whole currency units, kept as a two-place Decimal."""
    return to_money(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
