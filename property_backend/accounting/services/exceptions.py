# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for the posting, reversal and allocation engines.

Taxonomy:
- EngineValidationError: caller-correctable, carries the FULL list of problems
- ConcurrentModificationError: optimistic check lost a race (re-fetch + retry)
- IntegrityViolationError: ledger/balance invariant breached (fatal, abort)
"""

from __future__ import annotations

from dataclasses import dataclass

# ============================================================
# ERROR CODES
# ============================================================

UNKNOWN_INVOICE = "UnknownInvoice"
INVOICE_NOT_OPEN = "InvoiceNotOpen"
NON_POSITIVE_ALLOCATION = "NonPositiveAllocation"
OVER_ALLOCATION = "OverAllocation"
RECEIPT_OVERDRAWN = "ReceiptOverdrawn"
RECEIPT_NOT_OPEN = "ReceiptNotOpen"
UNKNOWN_RECEIPT = "UnknownReceipt"

INVALID_ACCOUNT_PAIR = "InvalidAccountPair"
NON_POSITIVE_AMOUNT = "NonPositiveAmount"
AMOUNT_OUT_OF_RANGE = "AmountOutOfRange"
UNKNOWN_SOURCE = "UnknownSource"
ALREADY_POSTED = "AlreadyPosted"
NOT_POSTED = "NotPosted"
PERIOD_CLOSED = "PeriodClosed"

EMPTY_REASON = "EmptyReason"
UNKNOWN_VOUCHER = "UnknownVoucher"
ALREADY_REVERSED = "AlreadyReversed"

INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
INVALID_DEPOSIT_DATE = "InvalidDepositDate"
INVALID_DATE = "InvalidDate"
UNKNOWN_OPERATION = "UnknownOperation"

CONCURRENT_MODIFICATION = "ConcurrentModification"

# Warning codes (never block)
UNALLOCATED_REMAINDER = "UnallocatedRemainder"
CUSTOMER_MISMATCH = "CustomerMismatch"
WEEKEND_POSTING_DATE = "WeekendPostingDate"
FUTURE_POSTING_DATE = "FuturePostingDate"
STALE_POSTING_DATE = "StalePostingDate"


@dataclass(frozen=True)
class EngineError:
    code: str
    message: str
    item_id: object = None
    field: str | None = None

    def as_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.item_id is not None:
            payload["item_id"] = self.item_id
        if self.field:
            payload["field"] = self.field
        return payload


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class EngineValidationError(AccountingServiceError):
    """Raised with every caller-correctable problem found, never just the first."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "Validation failed")

    @property
    def codes(self) -> list[str]:
        return [e.code for e in self.errors]

    def as_list(self) -> list[dict]:
        return [e.as_dict() for e in self.errors]


class ConcurrentModificationError(AccountingServiceError):
    """Raised when a version/flag check-and-set finds the row already changed."""

    code = CONCURRENT_MODIFICATION


class IntegrityViolationError(AccountingServiceError):
    """Raised when a ledger or balance invariant is found broken."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""
