# leasing/services/allocation_validator.py

"""
ALLOCATION VALIDATOR (SINGLE SOURCE OF TRUTH)

Every caller (API validate endpoint, allocation engine, bulk jobs) runs the
same rules from here; nothing re-implements them.

Per item, in order, first failure wins for that item:
1. invoice present + resolvable      -> UnknownInvoice
   invoice not Cancelled/Void        -> InvoiceNotOpen
2. amount > 0                        -> NonPositiveAllocation
   amount <= MAX_AMOUNT              -> AmountOutOfRange
3. amount <= remaining balance       -> OverAllocation
   (repeated invoice ids draw down the same running balance)

After all items (checked once, globally):
4. sum(amounts) <= receipt available -> ReceiptOverdrawn

Receipt level (validate_allocation / allocate): Bounced or Cancelled
receipts -> ReceiptNotOpen

All items are always checked: the result carries the full list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from accounting.services.exceptions import (
    AMOUNT_OUT_OF_RANGE,
    CUSTOMER_MISMATCH,
    INVOICE_NOT_OPEN,
    NON_POSITIVE_ALLOCATION,
    OVER_ALLOCATION,
    RECEIPT_OVERDRAWN,
    RECEIPT_NOT_OPEN,
    UNALLOCATED_REMAINDER,
    UNKNOWN_INVOICE,
    UNKNOWN_RECEIPT,
    EngineError,
)
from accounting.services.money import MAX_AMOUNT, ZERO, is_out_of_range, parse_money
from leasing.models.invoice import Invoice
from leasing.models.receipt import Receipt


@dataclass(frozen=True)
class AllocationLine:
    invoice_id: int | None
    amount: Decimal | None


@dataclass(frozen=True)
class InvoiceSnapshot:
    invoice_id: int
    invoice_no: str
    balance: Decimal
    status: str
    customer_id: int | None = None

    @property
    def is_open(self) -> bool:
        return self.status not in Invoice.CLOSED_STATUSES

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceSnapshot":
        return cls(
            invoice_id=invoice.pk,
            invoice_no=invoice.invoice_no,
            balance=invoice.balance_amount,
            status=invoice.status,
            customer_id=invoice.customer_id,
        )


@dataclass
class AllocationValidation:
    is_valid: bool
    errors: list[EngineError] = field(default_factory=list)
    warnings: list[EngineError] = field(default_factory=list)
    checked: list[AllocationLine] = field(default_factory=list)
    total: Decimal = ZERO

    def as_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.as_dict() for e in self.errors],
            "warnings": [w.as_dict() for w in self.warnings],
            "total_allocated": self.total,
        }


def _coerce_id(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def coerce_line(item) -> AllocationLine:
    """Accepts AllocationLine, (invoice_id, amount) pairs or mappings."""
    if isinstance(item, AllocationLine):
        return item
    if isinstance(item, Mapping):
        invoice_id = item.get("invoice_id", item.get("invoiceId"))
        amount = item.get("amount")
    else:
        invoice_id, amount = item
    return AllocationLine(_coerce_id(invoice_id), parse_money(amount))


def validate_distribution(
    receipt_amount,
    distribution: Iterable,
    balance_lookup: Callable[[int], InvoiceSnapshot | None],
    *,
    receipt_customer_id: int | None = None,
) -> AllocationValidation:
    available = parse_money(receipt_amount) or ZERO
    lines = [coerce_line(item) for item in distribution]

    errors: list[EngineError] = []
    warnings: list[EngineError] = []
    remaining: dict[int, Decimal] = {}
    total = ZERO

    if not lines:
        errors.append(
            EngineError(NON_POSITIVE_ALLOCATION, "Total allocation must be greater than zero", field="distribution")
        )

    for line in lines:
        snapshot = balance_lookup(line.invoice_id) if line.invoice_id is not None else None

        if snapshot is None:
            errors.append(
                EngineError(
                    UNKNOWN_INVOICE,
                    f"Invoice {line.invoice_id!r} not found",
                    line.invoice_id,
                    "invoice_id",
                )
            )
            continue

        if not snapshot.is_open:
            errors.append(
                EngineError(
                    INVOICE_NOT_OPEN,
                    f"Invoice {snapshot.invoice_no} is {snapshot.status}",
                    line.invoice_id,
                    "invoice_id",
                )
            )
            continue

        if line.amount is None or line.amount <= 0:
            errors.append(
                EngineError(
                    NON_POSITIVE_ALLOCATION,
                    f"Allocation to invoice {snapshot.invoice_no} must be greater than zero",
                    line.invoice_id,
                    "amount",
                )
            )
            continue

        if is_out_of_range(line.amount):
            errors.append(
                EngineError(
                    AMOUNT_OUT_OF_RANGE,
                    f"Allocation to invoice {snapshot.invoice_no} exceeds the maximum of {MAX_AMOUNT}",
                    line.invoice_id,
                    "amount",
                )
            )
            continue

        total += line.amount

        balance = remaining.get(line.invoice_id, snapshot.balance)
        if line.amount > balance:
            errors.append(
                EngineError(
                    OVER_ALLOCATION,
                    f"Allocation {line.amount} exceeds invoice {snapshot.invoice_no} balance {balance}",
                    line.invoice_id,
                    "amount",
                )
            )
            continue

        remaining[line.invoice_id] = balance - line.amount

        if receipt_customer_id is not None and snapshot.customer_id not in (None, receipt_customer_id):
            warnings.append(
                EngineError(
                    CUSTOMER_MISMATCH,
                    f"Invoice {snapshot.invoice_no} belongs to a different customer than the receipt",
                    line.invoice_id,
                    "invoice_id",
                )
            )

    if total > available:
        errors.append(
            EngineError(
                RECEIPT_OVERDRAWN,
                f"Total allocation {total} exceeds receipt amount available {available}",
                field="distribution",
            )
        )
    elif not errors and total < available:
        warnings.append(
            EngineError(
                UNALLOCATED_REMAINDER,
                f"{available - total} of the receipt will remain unallocated",
                field="distribution",
            )
        )

    return AllocationValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        checked=[] if errors else lines,
        total=total,
    )


def receipt_status_errors(receipt: Receipt) -> list[EngineError]:
    if receipt.is_open:
        return []
    return [
        EngineError(
            RECEIPT_NOT_OPEN,
            f"Receipt {receipt.receipt_no} is {receipt.payment_status} and cannot be allocated",
            receipt.pk,
            "receipt_id",
        )
    ]


class InvoiceBalanceLookup:
    """Preloads the invoices named by a distribution (one query)."""

    def __init__(self, invoice_ids, *, company_id: int | None = None):
        ids = {i for i in invoice_ids if i is not None}
        qs = Invoice.objects.filter(pk__in=ids)
        if company_id is not None:
            qs = qs.filter(company_id=company_id)
        self._snapshots = {inv.pk: InvoiceSnapshot.from_invoice(inv) for inv in qs}

    def __call__(self, invoice_id) -> InvoiceSnapshot | None:
        return self._snapshots.get(invoice_id)


def validate_allocation(
    receipt_id,
    amount,
    distribution,
    *,
    company_id: int | None = None,
) -> dict:
    """
    ValidateAllocation(receiptId, amount, [{invoiceId, amount}])
        -> {is_valid, errors[], warnings[], total_allocated}

    Available amount = receipt amount minus what is already allocated.
    When the receipt is unknown, `amount` stands in so the caller still
    sees every per-item problem alongside UnknownReceipt.
    """
    lines = [coerce_line(item) for item in distribution]

    receipt = None
    rid = _coerce_id(receipt_id)
    if rid is not None:
        receipts = Receipt.objects.filter(pk=rid)
        if company_id is not None:
            receipts = receipts.filter(company_id=company_id)
        receipt = receipts.first()

    pre_errors: list[EngineError] = []
    if receipt is None:
        pre_errors.append(
            EngineError(UNKNOWN_RECEIPT, f"Receipt {receipt_id!r} not found", receipt_id, "receipt_id")
        )
        available = parse_money(amount) or ZERO
        customer_id = None
    else:
        pre_errors += receipt_status_errors(receipt)
        available = receipt.unallocated_amount()
        customer_id = receipt.customer_id

    lookup = InvoiceBalanceLookup([line.invoice_id for line in lines], company_id=company_id)
    result = validate_distribution(available, lines, lookup, receipt_customer_id=customer_id)

    if pre_errors:
        result.errors = pre_errors + result.errors
        result.is_valid = False
        result.checked = []

    return result.as_dict()
