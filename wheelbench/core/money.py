from decimal import Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")

# Two currency values closer than this are treated as equal.
CENT = Decimal("0.01")


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """
    Coerce a numeric input to Decimal. Floats go through str() so that 450.1
    becomes Decimal('450.1') rather than its binary expansion.
    Returns None for None or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def is_valid_price(price: Optional[Decimal]) -> bool:
    return price is not None and price.is_finite() and price > 0


def percent(numerator: Decimal, denominator: Decimal) -> float:
    # Degenerate denominators (e.g. zero net invested) resolve to 0%, never NaN.
    if denominator == 0:
        return 0.0
    return float(numerator / denominator * 100)
