# accounting/services/period_lock.py

"""
======================================================
PATH: accounting/services/period_lock.py
======================================================
PERIOD LOCK GUARD

Purpose:
- Prevent posting ANY voucher whose posting_date falls inside a closed
  fiscal year for the company being posted to.
- When the caller names a fiscal year, the posting date must fall inside it.

Design:
- Thin, reusable guard
- Called by the posting and reversal engines
- Company + fiscal year come from the explicit PostingContext (never guessed)
"""

from __future__ import annotations

from datetime import date

from accounting.models.fiscal_year import FiscalYear


class PeriodLockedError(ValueError):
    """Raised when attempting to post into a closed or mismatched period."""


def assert_period_open(
    *,
    company_id: int,
    posting_date: date | None,
    fiscal_year_id: int | None = None,
) -> None:
    """
    Assert that posting_date is postable for the company.

    Usage:
        assert_period_open(company_id=1, posting_date=d, fiscal_year_id=fy.id)

    Raises:
        PeriodLockedError if the date is locked or outside the fiscal year.
    """
    if posting_date is None:
        return

    if fiscal_year_id is not None:
        fiscal_year = FiscalYear.objects.filter(
            pk=fiscal_year_id, company_id=company_id
        ).first()
        if fiscal_year is None:
            raise PeriodLockedError(
                f"Fiscal year {fiscal_year_id} does not exist for company {company_id}."
            )
        if fiscal_year.is_closed:
            raise PeriodLockedError(
                f"Posting blocked: fiscal year {fiscal_year.code} is closed."
            )
        if not fiscal_year.contains(posting_date):
            raise PeriodLockedError(
                f"Posting blocked: {posting_date} is outside fiscal year {fiscal_year.code}."
            )

    locked = FiscalYear.objects.filter(
        company_id=company_id,
        is_closed=True,
        start_date__lte=posting_date,
        end_date__gte=posting_date,
    ).exists()

    if locked:
        raise PeriodLockedError(
            f"Posting blocked: {posting_date} falls inside a closed fiscal year."
        )
