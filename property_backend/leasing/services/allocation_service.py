# leasing/services/allocation_service.py

"""
======================================================
PATH: leasing/services/allocation_service.py
======================================================
ALLOCATION ENGINE

This module is the ONLY place allowed to:
- Create ReceiptAllocation rows
- Mutate Invoice.paid_amount / balance_amount
- Move invoices to PartiallyPaid / Paid

Guarantees:
- Re-validates the distribution inside the transaction (never trusts a
  caller's "already validated" flag)
- Locks the receipt and every touched invoice (ordered by id) for the
  whole unit of work; invoice writes are versioned check-and-set updates
- All-or-nothing per receipt
- Remainder stays on the receipt as an explicit unallocated amount
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    UNKNOWN_RECEIPT,
    ConcurrentModificationError,
    EngineError,
    EngineValidationError,
    IntegrityViolationError,
)
from leasing.models.invoice import Invoice
from leasing.models.receipt import Receipt, ReceiptAllocation
from leasing.services.allocation_validator import (
    InvoiceSnapshot,
    coerce_line,
    receipt_status_errors,
    validate_distribution,
)

logger = logging.getLogger("receivables")


@dataclass(frozen=True)
class AllocationResult:
    receipt_id: int
    total_allocated: Decimal
    unallocated_remainder: Decimal
    allocation_ids: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "receipt_id": self.receipt_id,
            "total_allocated": self.total_allocated,
            "unallocated_remainder": self.unallocated_remainder,
            "allocation_ids": list(self.allocation_ids),
        }


def _lock_receipt(receipt_id, company_id: int) -> Receipt | None:
    try:
        pk = int(str(receipt_id).strip())
    except (TypeError, ValueError):
        return None
    return Receipt.objects.select_for_update().filter(pk=pk, company_id=company_id).first()


def _lock_invoices(invoice_ids, company_id: int) -> dict[int, Invoice]:
    # Deterministic lock order avoids deadlocks between overlapping receipts.
    rows = (
        Invoice.objects.select_for_update()
        .filter(pk__in=sorted({i for i in invoice_ids if i is not None}), company_id=company_id)
        .order_by("pk")
    )
    return {inv.pk: inv for inv in rows}


def _apply_line(invoice: Invoice, amount: Decimal) -> None:
    if invoice.balance_amount != invoice.total_amount - invoice.paid_amount:
        logger.error(
            "Invoice balance invariant broken",
            extra={"invoice_id": invoice.pk, "invoice_no": invoice.invoice_no},
        )
        raise IntegrityViolationError(
            f"Invoice {invoice.invoice_no}: balance != total - paid before allocation"
        )

    new_paid = invoice.paid_amount + amount
    new_balance = invoice.total_amount - new_paid
    if new_balance < 0 or new_paid > invoice.total_amount:
        logger.error(
            "Allocation would drive invoice balance negative",
            extra={"invoice_id": invoice.pk, "amount": str(amount)},
        )
        raise IntegrityViolationError(
            f"Invoice {invoice.invoice_no}: allocation of {amount} overpays the invoice"
        )

    new_status = Invoice.STATUS_PAID if new_balance == 0 else Invoice.STATUS_PARTIALLY_PAID

    updated = Invoice.objects.filter(pk=invoice.pk, version=invoice.version).update(
        paid_amount=new_paid,
        balance_amount=new_balance,
        status=new_status,
        version=invoice.version + 1,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise ConcurrentModificationError(
            f"Invoice {invoice.invoice_no} was modified concurrently; re-fetch and retry"
        )

    # Keep the in-memory row current for repeated lines on the same invoice.
    invoice.paid_amount = new_paid
    invoice.balance_amount = new_balance
    invoice.status = new_status
    invoice.version += 1


@transaction.atomic
def allocate(receipt_id, distribution, *, context: PostingContext) -> AllocationResult:
    """
    Allocate(receiptId, [{invoiceId, amount}]) -> {total_allocated, unallocated_remainder}
    """
    receipt = _lock_receipt(receipt_id, context.company_id)
    if receipt is None:
        raise EngineValidationError(
            [EngineError(UNKNOWN_RECEIPT, f"Receipt {receipt_id!r} not found", receipt_id, "receipt_id")]
        )

    lines = [coerce_line(item) for item in distribution]
    invoices = _lock_invoices([line.invoice_id for line in lines], receipt.company_id)

    available = receipt.unallocated_amount()

    def lookup(invoice_id):
        invoice = invoices.get(invoice_id)
        return InvoiceSnapshot.from_invoice(invoice) if invoice else None

    result = validate_distribution(
        available,
        lines,
        lookup,
        receipt_customer_id=receipt.customer_id,
    )
    errors = receipt_status_errors(receipt) + result.errors
    if errors:
        logger.warning(
            "Allocation rejected",
            extra={"receipt_id": receipt.pk, "codes": [e.code for e in errors]},
        )
        raise EngineValidationError(errors)

    allocation_ids: list[int] = []
    for line in result.checked:
        _apply_line(invoices[line.invoice_id], line.amount)
        allocation = ReceiptAllocation.objects.create(
            receipt=receipt,
            invoice_id=line.invoice_id,
            amount=line.amount,
            created_by_id=context.actor_id,
        )
        allocation_ids.append(allocation.pk)

    allocated_now = receipt.allocated_total()
    if allocated_now > receipt.amount:
        logger.error(
            "Receipt over-allocated",
            extra={"receipt_id": receipt.pk, "allocated": str(allocated_now)},
        )
        raise IntegrityViolationError(
            f"Receipt {receipt.receipt_no}: allocations {allocated_now} exceed amount {receipt.amount}"
        )

    outcome = AllocationResult(
        receipt_id=receipt.pk,
        total_allocated=result.total,
        unallocated_remainder=receipt.amount - allocated_now,
        allocation_ids=allocation_ids,
    )

    logger.info(
        "Receipt allocated",
        extra={
            "receipt_id": receipt.pk,
            "total_allocated": str(outcome.total_allocated),
            "unallocated_remainder": str(outcome.unallocated_remainder),
            "invoice_count": len({line.invoice_id for line in result.checked}),
            "actor_id": context.actor_id,
        },
    )
    return outcome
