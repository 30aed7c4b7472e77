# accounting/services/posting_sources.py

"""
======================================================
PATH: accounting/services/posting_sources.py
======================================================
POSTING SOURCE ADAPTERS

The posting and reversal engines never touch source tables directly.
Each postable record type exposes the same small contract:

- fetch(for_update=...)  -> the row (locked when for_update=True) or None
- validate(row)          -> extra EngineErrors specific to the source
- posted_conflicts(row)  -> AlreadyPosted errors for overlapping posted records
- mark_posted(row, v)    -> check-and-set is_posted False -> True (bool)
- mark_unposted(row, v)  -> check-and-set is_posted True -> False (bool)

Check-and-set = conditional UPDATE; a False return means another
caller won the race and the engine must roll back.

ANTI-CIRCULAR-IMPORT RULE:
- leasing models FK into accounting; import them lazily here.
"""

from __future__ import annotations

from django.db.models import Case, F, Value, When
from django.utils import timezone

from accounting.models.voucher import Voucher
from accounting.services.exceptions import (
    ALREADY_POSTED,
    INVALID_STATUS_TRANSITION,
    INVOICE_NOT_OPEN,
    UNKNOWN_SOURCE,
    EngineError,
)


def _int_or_none(value) -> int | None:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class PostingSource:
    source_type: str = ""
    voucher_kind: str = ""

    def __init__(self, source_id):
        self.source_id = str(source_id if source_id is not None else "").strip()

    def fetch(self, *, for_update: bool):
        raise NotImplementedError

    def company_id_of(self, row) -> int:
        return row.company_id

    def validate(self, row) -> list[EngineError]:
        return []

    def posted_conflicts(self, row) -> list[EngineError]:
        """Other posted records that already cover what this row would post."""
        return []

    def is_posted(self, row) -> bool:
        return bool(row.is_posted)

    def is_posted_with(self, row, voucher: Voucher) -> bool:
        return bool(row.is_posted) and row.voucher_id == voucher.pk

    def mark_posted(self, row, voucher: Voucher) -> bool:
        raise NotImplementedError

    def mark_unposted(self, row, voucher: Voucher) -> bool:
        raise NotImplementedError


# ============================================================
# RECEIPT
# ============================================================


class ReceiptSource(PostingSource):
    source_type = Voucher.SOURCE_RECEIPT
    voucher_kind = "RECEIPT"

    def fetch(self, *, for_update: bool):
        from leasing.models.receipt import Receipt

        pk = _int_or_none(self.source_id)
        if pk is None:
            return None

        qs = Receipt.objects.all()
        if for_update:
            qs = qs.select_for_update()
        return qs.filter(pk=pk).first()

    def validate(self, row) -> list[EngineError]:
        if row.payment_status == row.STATUS_CANCELLED:
            return [
                EngineError(
                    INVALID_STATUS_TRANSITION,
                    f"Receipt {row.receipt_no} is cancelled and cannot be posted",
                    self.source_id,
                )
            ]
        return []

    def mark_posted(self, row, voucher: Voucher) -> bool:
        from leasing.models.receipt import Receipt

        updated = Receipt.objects.filter(pk=row.pk, is_posted=False).update(
            is_posted=True,
            voucher=voucher,
            updated_at=timezone.now(),
        )
        return updated == 1

    def mark_unposted(self, row, voucher: Voucher) -> bool:
        from leasing.models.receipt import Receipt

        updated = Receipt.objects.filter(pk=row.pk, is_posted=True, voucher=voucher).update(
            is_posted=False,
            voucher=None,
            updated_at=timezone.now(),
        )
        return updated == 1


# ============================================================
# INVOICE
# ============================================================


class InvoiceSource(PostingSource):
    source_type = Voucher.SOURCE_INVOICE
    voucher_kind = "INVOICE"

    def fetch(self, *, for_update: bool):
        from leasing.models.invoice import Invoice

        pk = _int_or_none(self.source_id)
        if pk is None:
            return None

        qs = Invoice.objects.all()
        if for_update:
            qs = qs.select_for_update()
        return qs.filter(pk=pk).first()

    def validate(self, row) -> list[EngineError]:
        if not row.is_open:
            return [
                EngineError(
                    INVOICE_NOT_OPEN,
                    f"Invoice {row.invoice_no} is {row.status} and cannot be posted",
                    self.source_id,
                )
            ]
        return []

    def mark_posted(self, row, voucher: Voucher) -> bool:
        from leasing.models.invoice import Invoice

        # Draft -> Posted; payment-driven statuses are left alone.
        updated = Invoice.objects.filter(pk=row.pk, is_posted=False).update(
            is_posted=True,
            voucher=voucher,
            status=Case(
                When(status=Invoice.STATUS_DRAFT, then=Value(Invoice.STATUS_POSTED)),
                default=F("status"),
            ),
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        return updated == 1

    def mark_unposted(self, row, voucher: Voucher) -> bool:
        from leasing.models.invoice import Invoice

        # Posted -> Draft only; a paid/partially paid invoice keeps its status.
        updated = Invoice.objects.filter(pk=row.pk, is_posted=True, voucher=voucher).update(
            is_posted=False,
            voucher=None,
            status=Case(
                When(status=Invoice.STATUS_POSTED, then=Value(Invoice.STATUS_DRAFT)),
                default=F("status"),
            ),
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        return updated == 1


# ============================================================
# LEASE REVENUE (unit:start:end)
# ============================================================


class LeaseRevenueSource(PostingSource):
    source_type = Voucher.SOURCE_LEASE_REVENUE
    voucher_kind = "LEASE_REVENUE"

    def __init__(self, source_id):
        from leasing.services.lease_revenue import parse_source_id

        super().__init__(source_id)
        try:
            self.key = parse_source_id(self.source_id)
        except ValueError:
            self.key = None

    def fetch(self, *, for_update: bool):
        from leasing.models.contract import ContractUnit
        from leasing.models.lease_revenue import LeaseRevenuePosting

        if self.key is None:
            return None
        unit_id, period_start, period_end = self.key

        units = ContractUnit.objects.all()
        if for_update:
            # The unit row serializes first-time creation of the posting row.
            units = units.select_for_update()
        unit = units.filter(pk=unit_id).first()
        if unit is None:
            return None

        if for_update:
            row, _ = LeaseRevenuePosting.objects.select_for_update().get_or_create(
                contract_unit=unit,
                period_start=period_start,
                period_end=period_end,
            )
            return row

        row = LeaseRevenuePosting.objects.filter(
            contract_unit=unit,
            period_start=period_start,
            period_end=period_end,
        ).first()
        return row or LeaseRevenuePosting(
            contract_unit=unit,
            period_start=period_start,
            period_end=period_end,
        )

    def company_id_of(self, row) -> int:
        return row.contract_unit.contract.company_id

    def validate(self, row) -> list[EngineError]:
        from leasing.services.lease_revenue import overlap_days

        if overlap_days(row.contract_unit, row.period_start, row.period_end) <= 0:
            return [
                EngineError(
                    UNKNOWN_SOURCE,
                    f"Unit {row.contract_unit.unit_no} has no lease days between "
                    f"{row.period_start} and {row.period_end}",
                    self.source_id,
                    "source_id",
                )
            ]
        return self.posted_conflicts(row)

    def posted_conflicts(self, row) -> list[EngineError]:
        # Callers hold the unit row lock (fetch for_update), so this read
        # cannot race another posting for the same unit.
        from leasing.models.lease_revenue import LeaseRevenuePosting

        overlapping = (
            LeaseRevenuePosting.objects.filter(
                contract_unit_id=row.contract_unit_id,
                is_posted=True,
                period_start__lte=row.period_end,
                period_end__gte=row.period_start,
            )
            .exclude(pk=row.pk)
            .order_by("period_start")
            .first()
        )
        if overlapping is None:
            return []
        return [
            EngineError(
                ALREADY_POSTED,
                f"Unit {row.contract_unit.unit_no} already has revenue posted for "
                f"{overlapping.period_start} to {overlapping.period_end}",
                self.source_id,
                "source_id",
            )
        ]

    def mark_posted(self, row, voucher: Voucher) -> bool:
        from leasing.models.lease_revenue import LeaseRevenuePosting

        updated = LeaseRevenuePosting.objects.filter(pk=row.pk, is_posted=False).update(
            is_posted=True,
            voucher=voucher,
            amount=voucher.amount,
            updated_at=timezone.now(),
        )
        return updated == 1

    def mark_unposted(self, row, voucher: Voucher) -> bool:
        from leasing.models.lease_revenue import LeaseRevenuePosting

        updated = LeaseRevenuePosting.objects.filter(
            pk=row.pk, is_posted=True, voucher=voucher
        ).update(
            is_posted=False,
            voucher=None,
            updated_at=timezone.now(),
        )
        return updated == 1


SOURCES = {
    Voucher.SOURCE_RECEIPT: ReceiptSource,
    Voucher.SOURCE_INVOICE: InvoiceSource,
    Voucher.SOURCE_LEASE_REVENUE: LeaseRevenueSource,
}


def get_source(source_type, source_id) -> PostingSource | None:
    cls = SOURCES.get(str(source_type or "").strip().upper())
    if cls is None:
        return None
    return cls(source_id)
