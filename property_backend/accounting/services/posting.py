# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ENGINE

This module is the ONLY place allowed to:
- Create a Voucher for a receipt / invoice / lease revenue entry
- Create its two LedgerEntry legs
- Flip the source to is_posted=True

At-most-once guarantee:
- The source row is locked (select_for_update) for the whole transaction
- Voucher number allocation, both legs and the source flag update are one
  atomic unit; the flag update is a check-and-set (is_posted=False -> True)
- Posting an already-posted source fails with AlreadyPosted and writes nothing

Validation collects every problem (accounts, amount, source, period) into a
single EngineValidationError; it never stops at the first one.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from django.conf import settings
from django.db import transaction

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher
from accounting.services.account_rules import (
    AccountLookup,
    check_account_pair,
    check_amount_sign,
)
from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    ALREADY_POSTED,
    FUTURE_POSTING_DATE,
    NON_POSITIVE_AMOUNT,
    PERIOD_CLOSED,
    STALE_POSTING_DATE,
    UNKNOWN_SOURCE,
    WEEKEND_POSTING_DATE,
    EngineError,
    EngineValidationError,
    IntegrityViolationError,
)
from accounting.services.money import parse_money
from accounting.services.posting_sources import get_source
from accounting.services.voucher_numbers import next_voucher_no

logger = logging.getLogger("ledger")

DEFAULT_BACKDATE_WARNING_DAYS = 30


def _backdate_warning_days() -> int:
    value = getattr(settings, "FINANCE", {}).get("POSTING_BACKDATE_WARNING_DAYS")
    return int(value if value is not None else DEFAULT_BACKDATE_WARNING_DAYS)


def check_period(*, context: PostingContext, posting_date: date, item_id=None) -> list[EngineError]:
    # Lazy import: keeps the guard swappable and avoids import cycles.
    from accounting.services.period_lock import PeriodLockedError, assert_period_open

    try:
        assert_period_open(
            company_id=context.company_id,
            posting_date=posting_date,
            fiscal_year_id=context.fiscal_year_id,
        )
    except PeriodLockedError as exc:
        return [EngineError(PERIOD_CLOSED, str(exc), item_id, "posting_date")]
    return []


def posting_date_warnings(posting_date: date, *, today: date) -> list[EngineError]:
    warnings: list[EngineError] = []

    if posting_date.weekday() >= 5:
        warnings.append(
            EngineError(WEEKEND_POSTING_DATE, f"Posting date {posting_date} falls on a weekend", field="posting_date")
        )
    if posting_date > today:
        warnings.append(
            EngineError(FUTURE_POSTING_DATE, f"Posting date {posting_date} is in the future", field="posting_date")
        )
    elif today - posting_date > timedelta(days=_backdate_warning_days()):
        warnings.append(
            EngineError(
                STALE_POSTING_DATE,
                f"Posting date {posting_date} is more than {_backdate_warning_days()} days in the past",
                field="posting_date",
            )
        )

    return warnings


def _collect_errors(
    *,
    source_type,
    source_id,
    posting_date: date,
    debit_account_id,
    credit_account_id,
    amount,
    context: PostingContext,
    for_update: bool,
):
    """Returns (errors, source, row, amount)."""
    item_id = str(source_id) if source_id is not None else None

    errors: list[EngineError] = []
    errors += check_account_pair(
        debit_account_id,
        credit_account_id,
        lookup=AccountLookup(),
        item_id=item_id,
    )

    value = parse_money(amount)
    errors += check_amount_sign(value, code=NON_POSITIVE_AMOUNT, item_id=item_id)

    source = get_source(source_type, source_id)
    row = None
    if source is None:
        errors.append(
            EngineError(UNKNOWN_SOURCE, f"Unknown source type {source_type!r}", item_id, "source_type")
        )
    else:
        row = source.fetch(for_update=for_update)
        if row is None or source.company_id_of(row) != context.company_id:
            errors.append(
                EngineError(
                    UNKNOWN_SOURCE,
                    f"{source.source_type} {source.source_id} not found",
                    item_id,
                    "source_id",
                )
            )
            row = None
        elif source.is_posted(row):
            errors.append(
                EngineError(
                    ALREADY_POSTED,
                    f"{source.source_type} {source.source_id} is already posted",
                    item_id,
                    "source_id",
                )
            )
        else:
            errors += source.validate(row)

    errors += check_period(context=context, posting_date=posting_date, item_id=item_id)

    return errors, source, row, value


def assert_voucher_balanced(voucher: Voucher) -> tuple[LedgerEntry, LedgerEntry]:
    """
    Exactly one DEBIT and one CREDIT leg, equal amounts, different accounts.

    Returns (debit_leg, credit_leg). Raises IntegrityViolationError otherwise.
    """
    legs = list(voucher.ledger_entries.all())
    debits = [leg for leg in legs if leg.entry_type == LedgerEntry.DEBIT]
    credits = [leg for leg in legs if leg.entry_type == LedgerEntry.CREDIT]

    if (
        len(legs) != 2
        or len(debits) != 1
        or len(credits) != 1
        or debits[0].amount != credits[0].amount
        or debits[0].amount != voucher.amount
        or debits[0].account_id == credits[0].account_id
    ):
        logger.error(
            "Unbalanced voucher detected",
            extra={"voucher_no": voucher.voucher_no, "legs": len(legs)},
        )
        raise IntegrityViolationError(
            f"Voucher {voucher.voucher_no} does not have exactly two balanced legs"
        )

    return debits[0], credits[0]


def write_voucher(
    *,
    kind: str,
    posting_date: date,
    debit_account: Account,
    credit_account: Account,
    amount,
    narration: str,
    source_type: str,
    source_id: str,
    context: PostingContext,
    reference: str | None = None,
    **reversal_fields,
) -> Voucher:
    """Voucher header + both legs. Shared by posting and reversal; caller owns the transaction."""
    voucher = Voucher.objects.create(
        voucher_no=next_voucher_no(kind=kind, year=posting_date.year),
        posting_date=posting_date,
        narration=narration,
        source_type=source_type,
        source_id=source_id,
        reference=reference,
        amount=amount,
        company_id=context.company_id,
        fiscal_year_id=context.fiscal_year_id,
        created_by_id=context.actor_id,
        **reversal_fields,
    )

    LedgerEntry.objects.create(
        voucher=voucher,
        account=debit_account,
        entry_type=LedgerEntry.DEBIT,
        amount=amount,
    )
    LedgerEntry.objects.create(
        voucher=voucher,
        account=credit_account,
        entry_type=LedgerEntry.CREDIT,
        amount=amount,
    )
    return voucher


@transaction.atomic
def post(
    *,
    source_type: str,
    source_id,
    posting_date: date | None,
    debit_account_id,
    credit_account_id,
    amount,
    narration: str = "",
    reference: str | None = None,
    context: PostingContext,
) -> Voucher:
    posting_date = posting_date or context.as_of()

    errors, source, row, value = _collect_errors(
        source_type=source_type,
        source_id=source_id,
        posting_date=posting_date,
        debit_account_id=debit_account_id,
        credit_account_id=credit_account_id,
        amount=amount,
        context=context,
        for_update=True,
    )
    if errors:
        logger.warning(
            "Posting rejected",
            extra={
                "source_type": source_type,
                "source_id": str(source_id),
                "codes": [e.code for e in errors],
            },
        )
        raise EngineValidationError(errors)

    narration = (narration or "").strip() or f"{source.source_type} {source.source_id}"

    voucher = write_voucher(
        kind=source.voucher_kind,
        posting_date=posting_date,
        debit_account=Account.objects.get(pk=int(debit_account_id)),
        credit_account=Account.objects.get(pk=int(credit_account_id)),
        amount=value,
        narration=narration,
        source_type=source.source_type,
        source_id=source.source_id,
        reference=reference,
        context=context,
    )

    # Check-and-set: losing here rolls back the voucher and both legs.
    if not source.mark_posted(row, voucher):
        raise EngineValidationError(
            [
                EngineError(
                    ALREADY_POSTED,
                    f"{source.source_type} {source.source_id} was posted concurrently",
                    source.source_id,
                    "source_id",
                )
            ]
        )

    assert_voucher_balanced(voucher)

    logger.info(
        "Voucher posted",
        extra={
            "voucher_no": voucher.voucher_no,
            "source_type": voucher.source_type,
            "source_id": voucher.source_id,
            "amount": str(voucher.amount),
            "actor_id": context.actor_id,
            "company_id": context.company_id,
        },
    )
    return voucher


def validate_posting(
    *,
    source_type: str,
    source_id,
    posting_date: date | None,
    debit_account_id,
    credit_account_id,
    amount,
    context: PostingContext,
) -> dict:
    """Dry run of post(): same checks, no locks, no writes, plus date warnings."""
    posting_date = posting_date or context.as_of()

    errors, _, _, _ = _collect_errors(
        source_type=source_type,
        source_id=source_id,
        posting_date=posting_date,
        debit_account_id=debit_account_id,
        credit_account_id=credit_account_id,
        amount=amount,
        context=context,
        for_update=False,
    )
    warnings = posting_date_warnings(posting_date, today=context.as_of())

    return {
        "is_valid": not errors,
        "errors": [e.as_dict() for e in errors],
        "warnings": [w.as_dict() for w in warnings],
    }
