import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

_CENTS = Decimal("0.01")
_TENTHS = Decimal("0.1")

# Enough digits for the integer part of the largest float plus the fraction
_PRECISION = 340


def _round(value: float, quantum: Decimal) -> float:
    # Sums of finite amounts can still overflow to inf
    if not math.isfinite(value):
        return value
    # Decimal(float) is the exact binary value, so halves round the same way
    # a fixed-point formatter does.
    with localcontext() as context:
        context.prec = _PRECISION
        return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def round_money(value: float) -> float:
    return _round(value, _CENTS)


def round_percent(value: float) -> float:
    return _round(value, _TENTHS)


def magnitude(amount: float) -> float:
    return abs(amount)
