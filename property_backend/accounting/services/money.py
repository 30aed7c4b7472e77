# accounting/services/money.py

"""
MONEY HELPERS

All engine arithmetic is Decimal, quantized to 2 places (ROUND_HALF_UP).
Floats never enter the ledger.

Amount columns are DecimalField(max_digits=14, decimal_places=2), so the
largest storable amount is MAX_AMOUNT. Anything larger is a caller error
(AmountOutOfRange), reported by the validators, never a crash.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0.00")
MAX_AMOUNT = Decimal("999999999999.99")


def parse_money(value) -> Decimal | None:
    """
    Lenient parse for validation paths.

    Returns None for missing/unparseable input so validators can report
    a structured error instead of raising. Finite values too large to
    quantize come back unquantized; is_out_of_range() flags them.
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return None

    if not amt.is_finite():
        return None

    try:
        return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return amt


def is_out_of_range(amount: Decimal | None) -> bool:
    return amount is not None and abs(amount) > MAX_AMOUNT
