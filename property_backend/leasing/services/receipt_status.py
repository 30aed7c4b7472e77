# leasing/services/receipt_status.py

"""
RECEIPT STATUS LIFECYCLE

This module defines the ONLY allowed payment status transitions
for Receipt entities, and the two mutators that apply them.

Posted receipts:
- Status and deposit/clearance fields stay mutable
- A posted receipt cannot be Cancelled (reverse its voucher first)
"""

from __future__ import annotations

import logging
from datetime import date

from django.db import transaction

from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    INVALID_DEPOSIT_DATE,
    INVALID_STATUS_TRANSITION,
    UNKNOWN_RECEIPT,
    EngineError,
    EngineValidationError,
)
from leasing.models.receipt import Receipt

logger = logging.getLogger("receivables")

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Receipt.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Receipt.STATUS_RECEIVED: {
        Receipt.STATUS_DEPOSITED,
        Receipt.STATUS_CLEARED,
        Receipt.STATUS_BOUNCED,
        Receipt.STATUS_CANCELLED,
    },
    Receipt.STATUS_DEPOSITED: {
        Receipt.STATUS_CLEARED,
        Receipt.STATUS_BOUNCED,
        Receipt.STATUS_CANCELLED,
    },
    Receipt.STATUS_CLEARED: {
        Receipt.STATUS_BOUNCED,
    },
    Receipt.STATUS_BOUNCED: {
        Receipt.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def _lock_receipt(receipt_id, company_id: int) -> Receipt:
    try:
        pk = int(str(receipt_id).strip())
    except (TypeError, ValueError):
        pk = None

    receipt = (
        Receipt.objects.select_for_update().filter(pk=pk, company_id=company_id).first()
        if pk is not None
        else None
    )
    if receipt is None:
        raise EngineValidationError(
            [EngineError(UNKNOWN_RECEIPT, f"Receipt {receipt_id!r} not found", receipt_id, "receipt_id")]
        )
    return receipt


# ============================================================
# MUTATORS
# ============================================================


@transaction.atomic
def change_receipt_status(
    receipt_id,
    status: str,
    *,
    context: PostingContext,
    clearance_date: date | None = None,
) -> Receipt:
    receipt = _lock_receipt(receipt_id, context.company_id)
    item_id = str(receipt.pk)

    errors: list[EngineError] = []
    if not can_transition(from_status=receipt.payment_status, to_status=status):
        errors.append(
            EngineError(
                INVALID_STATUS_TRANSITION,
                f"Receipt {receipt.receipt_no} cannot transition from "
                f"'{receipt.payment_status}' to '{status}'",
                item_id,
                "status",
            )
        )
    elif status == Receipt.STATUS_CANCELLED and receipt.is_posted:
        errors.append(
            EngineError(
                INVALID_STATUS_TRANSITION,
                f"Receipt {receipt.receipt_no} is posted; reverse its voucher before cancelling",
                item_id,
                "status",
            )
        )

    if status == Receipt.STATUS_CLEARED:
        clearance_date = clearance_date or context.as_of()
        if clearance_date < receipt.received_date:
            errors.append(
                EngineError(
                    INVALID_DEPOSIT_DATE,
                    f"Clearance date {clearance_date} is before receipt date {receipt.received_date}",
                    item_id,
                    "clearance_date",
                )
            )

    if errors:
        raise EngineValidationError(errors)

    previous = receipt.payment_status
    receipt.payment_status = status
    update_fields = ["payment_status", "updated_at"]
    if status == Receipt.STATUS_CLEARED:
        receipt.clearance_date = clearance_date
        update_fields.append("clearance_date")

    receipt.save(update_fields=update_fields)

    logger.info(
        "Receipt status changed",
        extra={
            "receipt_id": receipt.pk,
            "from_status": previous,
            "to_status": status,
            "actor_id": context.actor_id,
        },
    )
    return receipt


@transaction.atomic
def set_deposit_info(
    receipt_id,
    *,
    deposit_date: date,
    deposit_bank: str = "",
    context: PostingContext,
) -> Receipt:
    receipt = _lock_receipt(receipt_id, context.company_id)
    item_id = str(receipt.pk)

    errors: list[EngineError] = []
    if deposit_date is None:
        errors.append(EngineError(INVALID_DEPOSIT_DATE, "Deposit date is required", item_id, "deposit_date"))
    elif deposit_date < receipt.received_date:
        errors.append(
            EngineError(
                INVALID_DEPOSIT_DATE,
                f"Deposit date {deposit_date} is before receipt date {receipt.received_date}",
                item_id,
                "deposit_date",
            )
        )
    if not receipt.is_open:
        errors.append(
            EngineError(
                INVALID_STATUS_TRANSITION,
                f"Receipt {receipt.receipt_no} is {receipt.payment_status}; deposit info cannot change",
                item_id,
                "status",
            )
        )
    if errors:
        raise EngineValidationError(errors)

    receipt.deposit_date = deposit_date
    receipt.deposit_bank = (deposit_bank or "").strip()
    update_fields = ["deposit_date", "deposit_bank", "updated_at"]
    if receipt.payment_status == Receipt.STATUS_RECEIVED:
        receipt.payment_status = Receipt.STATUS_DEPOSITED
        update_fields.append("payment_status")

    receipt.save(update_fields=update_fields)

    logger.info(
        "Receipt deposit recorded",
        extra={
            "receipt_id": receipt.pk,
            "deposit_date": str(deposit_date),
            "actor_id": context.actor_id,
        },
    )
    return receipt
