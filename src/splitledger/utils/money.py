from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


CENT = Decimal("0.01")

_AMOUNT_RE = re.compile(r"^\$?\s*(\d+(?:[.,]\d{1,2})?)$")


def round_money(value: float) -> float:
    # -0.0 compares equal to 0 but leaks into formatting
    return round(value, 2) + 0.0


def is_zero(value: float, epsilon: float = 0.01) -> bool:
    return abs(value) < epsilon


def parse_amount(text: str) -> float:
    """
    Parse a user-entered currency amount.

    Accepts "12", "12.5", "12,50" and "$12.50". Negative values and more than
    two decimal places are rejected.
    """
    match = _AMOUNT_RE.match(text.strip())
    if not match:
        raise ValueError("Please enter a valid amount")

    try:
        value = Decimal(match.group(1).replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError("Please enter a valid amount") from exc

    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))
