# leasing/services/lease_revenue.py

"""
LEASE REVENUE ENTRIES (ON-DEMAND ACCRUALS)

A lease revenue entry is rent earned by one contract unit over a period.
It is computed from contract data, never stored, until it is posted:
posting creates a LeaseRevenuePosting row keyed by (unit, period).

Amounts:
- total_lease_days = inclusive overlap of [period_start, period_end]
  with [lease_start, lease_end]
- rent_per_day     = yearly_rent / LEASE_DAYS_PER_YEAR   (4 places)
- posting_amount   = rent_per_day × total_lease_days     (2 places)

Source id used by the posting engine: "<unit_id>:<YYYY-MM-DD>:<YYYY-MM-DD>"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from accounting.services.money import FOURPLACES, TWOPLACES, ZERO
from leasing.models.contract import ContractUnit
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.services.rent_sync import synchronize_rent

DEFAULT_DAYS_PER_YEAR = 365


@dataclass(frozen=True)
class LeaseRevenueEntry:
    contract_unit_id: int
    lease_no: str
    unit_no: str
    customer_id: int
    company_id: int
    period_start: date
    period_end: date
    total_lease_days: int
    rent_per_day: Decimal
    posting_amount: Decimal
    current_balance: Decimal
    is_posted: bool
    voucher_no: str | None

    @property
    def source_id(self) -> str:
        return make_source_id(self.contract_unit_id, self.period_start, self.period_end)

    def as_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "contract_unit_id": self.contract_unit_id,
            "lease_no": self.lease_no,
            "unit_no": self.unit_no,
            "customer_id": self.customer_id,
            "company_id": self.company_id,
            "period_start": self.period_start,
            "period_end": self.period_end,
            "total_lease_days": self.total_lease_days,
            "rent_per_day": self.rent_per_day,
            "posting_amount": self.posting_amount,
            "current_balance": self.current_balance,
            "is_posted": self.is_posted,
            "voucher_no": self.voucher_no,
        }


def days_per_year() -> int:
    return int(getattr(settings, "FINANCE", {}).get("LEASE_DAYS_PER_YEAR") or DEFAULT_DAYS_PER_YEAR)


def make_source_id(contract_unit_id, period_start: date, period_end: date) -> str:
    return f"{contract_unit_id}:{period_start.isoformat()}:{period_end.isoformat()}"


def parse_source_id(source_id) -> tuple[int, date, date]:
    """Raises ValueError on malformed keys."""
    parts = str(source_id or "").strip().split(":")
    if len(parts) != 3:
        raise ValueError(f"Malformed lease revenue source id: {source_id!r}")

    unit_id = int(parts[0])
    start = date.fromisoformat(parts[1])
    end = date.fromisoformat(parts[2])
    if end < start:
        raise ValueError(f"Lease revenue period ends before it starts: {source_id!r}")
    return unit_id, start, end


def _yearly_rent(unit: ContractUnit) -> Decimal | None:
    if unit.yearly_rent:
        return unit.yearly_rent
    terms = synchronize_rent(
        monthly_rent=unit.monthly_rent,
        yearly_rent=unit.yearly_rent,
        installment_count=unit.installment_count,
    )
    return terms.yearly_rent


def overlap_days(unit: ContractUnit, period_start: date, period_end: date) -> int:
    start = max(unit.lease_start, period_start)
    end = min(unit.lease_end, period_end)
    if end < start:
        return 0
    return (end - start).days + 1


def compute_entry(
    unit: ContractUnit,
    period_start: date,
    period_end: date,
    posting: LeaseRevenuePosting | None = None,
) -> LeaseRevenueEntry | None:
    """None when the unit earns nothing in the period (no overlap / no rent)."""
    yearly = _yearly_rent(unit)
    days = overlap_days(unit, period_start, period_end)
    if not yearly or days <= 0:
        return None

    rent_per_day = (yearly / days_per_year()).quantize(FOURPLACES, rounding=ROUND_HALF_UP)
    posting_amount = (rent_per_day * days).quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    is_posted = bool(posting and posting.is_posted)
    voucher_no = posting.voucher.voucher_no if is_posted and posting.voucher_id else None

    return LeaseRevenueEntry(
        contract_unit_id=unit.pk,
        lease_no=unit.contract.contract_no,
        unit_no=unit.unit_no,
        customer_id=unit.contract.customer_id,
        company_id=unit.contract.company_id,
        period_start=period_start,
        period_end=period_end,
        total_lease_days=days,
        rent_per_day=rent_per_day,
        posting_amount=posting_amount,
        current_balance=ZERO if is_posted else posting_amount,
        is_posted=is_posted,
        voucher_no=voucher_no,
    )


def list_entries(
    period_start: date,
    period_end: date,
    *,
    company_id: int | None = None,
    unposted_only: bool = True,
) -> list[LeaseRevenueEntry]:
    if period_end < period_start:
        raise ValueError("period_end cannot be before period_start")

    units = ContractUnit.objects.select_related("contract").filter(
        lease_start__lte=period_end,
        lease_end__gte=period_start,
    )
    if company_id is not None:
        units = units.filter(contract__company_id=company_id)

    postings = {
        p.contract_unit_id: p
        for p in LeaseRevenuePosting.objects.select_related("voucher").filter(
            contract_unit__in=units,
            period_start=period_start,
            period_end=period_end,
        )
    }

    # Units whose days in this period are already covered by a posted,
    # differently-bounded period; posting them again would double-book.
    covered_elsewhere = set(
        LeaseRevenuePosting.objects.filter(
            contract_unit__in=units,
            is_posted=True,
            period_start__lte=period_end,
            period_end__gte=period_start,
        )
        .exclude(period_start=period_start, period_end=period_end)
        .values_list("contract_unit_id", flat=True)
    )

    entries: list[LeaseRevenueEntry] = []
    for unit in units.order_by("contract__contract_no", "unit_no"):
        entry = compute_entry(unit, period_start, period_end, postings.get(unit.pk))
        if entry is None:
            continue
        if unposted_only and (entry.is_posted or unit.pk in covered_elsewhere):
            continue
        entries.append(entry)

    return entries
