# accounting/services/reversal.py

"""
======================================================
PATH: accounting/services/reversal.py
======================================================
REVERSAL ENGINE

reverse(voucher_no, reason) never edits or deletes the original voucher.
It writes a NEW voucher with the legs swapped (same accounts, same amount,
roles inverted), dated at reversal time, and links the two:

    original.reversed_by  -> new voucher   (the only permitted mutation)
    new.reversal_of       -> original
    new.root_voucher      -> first voucher of the chain
    new.reversal_depth    =  original.reversal_depth + 1

Source flag (same contract for receipts, invoices and lease revenue):
- even depth (an original posting, or a re-reversal that re-posted it):
  the source must currently be posted WITH this voucher -> set unposted
- odd depth (a reversal): the source must currently be unposted
  -> re-posted against the new voucher, restoring the original net effect

Locks the original voucher and the source row, so a reversal and a
posting of the same source never interleave.
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.voucher import Voucher
from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    ALREADY_POSTED,
    ALREADY_REVERSED,
    EMPTY_REASON,
    NOT_POSTED,
    UNKNOWN_SOURCE,
    UNKNOWN_VOUCHER,
    ConcurrentModificationError,
    EngineError,
    EngineValidationError,
)
from accounting.services.posting import (
    assert_voucher_balanced,
    check_period,
    write_voucher,
)
from accounting.services.posting_sources import get_source

logger = logging.getLogger("ledger")

REVERSAL_KIND = "REVERSAL"


@transaction.atomic
def reverse(*, voucher_no: str, reason: str, context: PostingContext) -> Voucher:
    voucher_no = (voucher_no or "").strip()
    reason = (reason or "").strip()

    errors: list[EngineError] = []
    if not reason:
        errors.append(EngineError(EMPTY_REASON, "A reversal reason is required", voucher_no, "reason"))

    original = (
        Voucher.objects.select_for_update()
        .filter(voucher_no=voucher_no, company_id=context.company_id)
        .first()
        if voucher_no
        else None
    )
    if original is None:
        errors.append(EngineError(UNKNOWN_VOUCHER, f"Voucher {voucher_no!r} not found", voucher_no, "voucher_no"))
        raise EngineValidationError(errors)

    if original.reversed_by_id is not None:
        errors.append(
            EngineError(ALREADY_REVERSED, f"Voucher {voucher_no} is already reversed", voucher_no, "voucher_no")
        )

    source = get_source(original.source_type, original.source_id)
    row = source.fetch(for_update=True) if source else None
    if row is None:
        errors.append(
            EngineError(
                UNKNOWN_SOURCE,
                f"Source {original.source_type} {original.source_id} of voucher {voucher_no} not found",
                voucher_no,
            )
        )
    elif original.reversal_depth % 2 == 0:
        if not source.is_posted_with(row, original):
            errors.append(
                EngineError(
                    NOT_POSTED,
                    f"{source.source_type} {source.source_id} is not posted with voucher {voucher_no}",
                    voucher_no,
                )
            )
    elif source.is_posted(row):
        errors.append(
            EngineError(
                ALREADY_POSTED,
                f"{source.source_type} {source.source_id} has been posted again; "
                f"reverse its current voucher instead",
                voucher_no,
            )
        )
    else:
        # Re-posting must not double-book what another voucher now covers.
        errors += source.posted_conflicts(row)

    reversal_date = context.as_of()
    errors += check_period(context=context, posting_date=reversal_date, item_id=voucher_no)

    if errors:
        logger.warning(
            "Reversal rejected",
            extra={"voucher_no": voucher_no, "codes": [e.code for e in errors]},
        )
        raise EngineValidationError(errors)

    debit_leg, credit_leg = assert_voucher_balanced(original)

    reversal = write_voucher(
        kind=REVERSAL_KIND,
        posting_date=reversal_date,
        debit_account=credit_leg.account,
        credit_account=debit_leg.account,
        amount=original.amount,
        narration=f"Reversal of {original.voucher_no}: {reason}",
        source_type=original.source_type,
        source_id=original.source_id,
        reference=original.voucher_no,
        context=context,
        is_reversal=True,
        reversal_of=original,
        root_voucher_id=original.root_id,
        reversal_depth=original.reversal_depth + 1,
        reversal_reason=reason,
    )

    # Only permitted mutation of a voucher: reversed_by NULL -> reversal.
    linked = Voucher.objects.filter(pk=original.pk, reversed_by__isnull=True).update(
        reversed_by=reversal
    )
    if linked != 1:
        raise ConcurrentModificationError(f"Voucher {original.voucher_no} was reversed concurrently")

    if original.reversal_depth % 2 == 0:
        flipped = source.mark_unposted(row, original)
    else:
        flipped = source.mark_posted(row, reversal)
    if not flipped:
        raise ConcurrentModificationError(
            f"{source.source_type} {source.source_id} changed while reversing {original.voucher_no}"
        )

    assert_voucher_balanced(reversal)

    logger.info(
        "Voucher reversed",
        extra={
            "voucher_no": original.voucher_no,
            "reversal_no": reversal.voucher_no,
            "reversal_depth": reversal.reversal_depth,
            "root_voucher_id": reversal.root_voucher_id,
            "actor_id": context.actor_id,
        },
    )
    return reversal
