"""
Currency helpers.

Amounts are Decimal end to end; floats only appear at the JSON boundary.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import PlainSerializer

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() avoids binary float artefacts (Decimal(0.1) != Decimal("0.1"))
    return Decimal(str(value))


def to_cents(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_provider_cents(value: Any) -> int:
    """Integer minor units as expected by the payment provider"""
    return int((to_cents(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
