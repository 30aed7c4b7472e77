# leasing/services/rent_sync.py

"""
RENT CALCULATION SYNCHRONIZER

Keeps monthly rent, yearly rent and installment count consistent
using: yearly = monthly × installments.

Rules:
- A value of None or 0 counts as "not supplied".
- Exactly two supplied -> derive the third:
    monthly + yearly        -> installments = round(yearly / monthly)
    monthly + installments  -> yearly = monthly × installments
    yearly + installments   -> monthly = yearly / installments
- All three supplied and |monthly × installments - yearly| > tolerance
    -> yearly is recomputed (monthly + installments are authoritative).
- Fewer than two supplied -> unchanged.

No database access; safe to call from model.clean() and API previews.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from accounting.services.money import TWOPLACES, is_out_of_range, parse_money

DEFAULT_TOLERANCE = Decimal("0.01")

DERIVED_MONTHLY = "monthly_rent"
DERIVED_YEARLY = "yearly_rent"
DERIVED_INSTALLMENTS = "installment_count"


@dataclass(frozen=True)
class RentTerms:
    monthly_rent: Decimal | None
    yearly_rent: Decimal | None
    installment_count: int | None
    derived: str | None = None

    def as_dict(self) -> dict:
        return {
            "monthly_rent": self.monthly_rent,
            "yearly_rent": self.yearly_rent,
            "installment_count": self.installment_count,
            "derived": self.derived,
        }


def configured_tolerance() -> Decimal:
    raw = getattr(settings, "FINANCE", {}).get("RENT_SYNC_TOLERANCE")
    value = parse_money(raw)
    return value if value is not None else DEFAULT_TOLERANCE


def _count(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _amount(value) -> Decimal | None:
    amt = parse_money(value)
    if amt is None or amt <= 0 or is_out_of_range(amt):
        return None
    return amt


def synchronize_rent(
    monthly_rent=None,
    yearly_rent=None,
    installment_count=None,
    *,
    tolerance: Decimal | None = None,
) -> RentTerms:
    monthly = _amount(monthly_rent)
    yearly = _amount(yearly_rent)
    installments = _count(installment_count)

    if tolerance is None:
        tolerance = configured_tolerance()

    if monthly and installments and yearly:
        expected = (monthly * installments).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        if abs(expected - yearly) > tolerance:
            return RentTerms(monthly, expected, installments, DERIVED_YEARLY)
        return RentTerms(monthly, yearly, installments)

    if monthly and installments:
        yearly = (monthly * installments).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        return RentTerms(monthly, yearly, installments, DERIVED_YEARLY)

    if yearly and installments:
        monthly = (yearly / installments).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        return RentTerms(monthly, yearly, installments, DERIVED_MONTHLY)

    if monthly and yearly:
        derived = int((yearly / monthly).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        if derived <= 0:
            # yearly below half a month: no meaningful installment count
            return RentTerms(monthly, yearly, None)
        return RentTerms(monthly, yearly, derived, DERIVED_INSTALLMENTS)

    return RentTerms(monthly, yearly, installments)
