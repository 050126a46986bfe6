from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Iterable

getcontext().prec = 28
CENTS = Decimal("0.01")
EPSILON = Decimal("0.01")
ZERO = Decimal("0")
DEFAULT_CURRENCY = "USD"


def qround(d: Decimal) -> Decimal:
    # ROUND_HALF_UP on Decimal rounds half away from zero
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def is_zero(amount: Decimal, epsilon: Decimal = EPSILON) -> bool:
    return abs(amount) <= epsilon


def dsum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def normalize_currency(code: str) -> str:
    code = code.strip().upper()
    if len(code) != 3 or not code.isascii() or not code.isalpha():
        raise ValueError(f"Invalid currency code: {code!r}")
    return code
