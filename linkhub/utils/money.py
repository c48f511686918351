from decimal import Decimal, ROUND_HALF_UP

# Razorpay expects the smallest currency unit (paise for INR)
MINOR_UNITS = {
    "INR": 100,
    "USD": 100,
    "EUR": 100,
    "JPY": 1,
}


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 999.9 from dragging binary noise along
    return Decimal(str(value))


def to_minor_units(amount, currency: str = "INR") -> int:
    """Major-unit amount -> integer minor units, rounded half-up."""
    factor = MINOR_UNITS.get(currency.upper(), 100)
    return int((to_decimal(amount) * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_discount(amount_minor: int, discount_percent) -> int:
    """Apply a percentage discount to a minor-unit amount, rounded half-up."""
    discount = to_decimal(discount_percent)
    if discount <= 0:
        return amount_minor
    if discount >= 100:
        return 0
    discounted = Decimal(amount_minor) * (Decimal(100) - discount) / Decimal(100)
    return int(discounted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor: int, currency: str = "INR") -> str:
    factor = MINOR_UNITS.get(currency.upper(), 100)
    if factor == 1:
        return str(amount_minor)
    return str((Decimal(amount_minor) / factor).quantize(Decimal("0.01")))
