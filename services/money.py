# services/money.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
     """Coerce to Decimal and round half-up to cents."""
     if value is None:
          return ZERO
     if not isinstance(value, Decimal):
          value = Decimal(str(value))
     return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
     """part / whole * 100 to two places; 0 when whole is 0."""
     if not whole:
          return ZERO
     return to_money(Decimal(part) / Decimal(whole) * 100)


def format_amount(value: Any) -> str:
     return f"{to_money(value):.2f}"
