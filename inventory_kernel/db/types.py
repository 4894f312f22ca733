"""
Module: inventory_kernel.db.types
Responsibility: Precision constants and rounding helpers for money and
    unit-cost values.  Centralizes precision and rounding so that the costing
    engine, the services and the selectors all agree on the same numbers.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, selectors/ and inventory_engines.  MUST NOT import from any
    of those layers.

Invariants enforced:
    - No floats.  Every monetary amount and unit cost is a Decimal.
    - round_cost() is the ONLY sanctioned rounding for average unit cost;
      round_amount() is the only one for order totals and report figures.
      Rounding happens before persisting and before comparing two averages.
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

COST_DECIMAL_PLACES = 4
AMOUNT_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_EVEN


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce an int, str or Decimal into a Decimal.

    Floats are rejected: binary floating point cannot represent most cent
    amounts exactly.

    Raises:
        TypeError: If value is a float or another unsupported type.
        ValueError: If a string does not parse as a number.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Monetary values must not be float/bool, got {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal number: {value!r}") from exc
    raise TypeError(f"Unsupported monetary value: {value!r}")


def _quantize(value: Decimal, decimal_places: int, rounding: str) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=rounding)


def round_cost(
    value: Decimal,
    decimal_places: int = COST_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round an average unit cost.

    Two averages are "equal" for cost-log purposes iff they are equal after
    this rounding.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to keep.
        rounding: A ``decimal`` rounding mode (default ROUND_HALF_EVEN).
    """
    return _quantize(value, decimal_places, rounding)


def round_amount(
    value: Decimal,
    decimal_places: int = AMOUNT_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """Round a currency amount (order total, revenue, COGS)."""
    return _quantize(value, decimal_places, rounding)


def validate_currency(currency: str) -> str:
    """Return the upper-cased code if it looks like ISO 4217, else raise ValueError."""
    code = (currency or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"Invalid ISO 4217 currency code: '{currency}'")
    return code
