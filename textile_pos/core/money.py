from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() of a float is the shortest string that round-trips.
        return Decimal(repr(value))
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def floor_points(value) -> int:
    value = to_decimal(value)
    if value <= 0:
        return 0
    return int(value.to_integral_value(rounding=ROUND_DOWN))


def format_money(value, symbol="$") -> str:
    return "{}{:.2f}".format(symbol, quantize_money(value))
