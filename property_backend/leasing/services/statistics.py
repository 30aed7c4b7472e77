# leasing/services/statistics.py

"""
RECEIVABLES STATISTICS

Read-side rollups for dashboards and reports.

Contract:
- Read-only: no mutations, no postings, no locks
- Amounts are Decimal quantized to 2 places; counts are ints
- Missing optional joins (receipt with no allocation, invoice with no
  contract unit) are excluded from denominators, never an error
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import Count, Exists, OuterRef, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from accounting.models.voucher import Voucher
from accounting.services.money import TWOPLACES, ZERO
from leasing.models.invoice import Invoice
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.models.receipt import Receipt, ReceiptAllocation
from leasing.services.lease_revenue import list_entries

DEFAULT_DEPOSIT_OVERDUE_DAYS = 7

AGING_BUCKETS = ("current", "1_30", "31_60", "61_90", "90_plus")


def _q2(amount) -> Decimal:
    return (amount or ZERO).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _deposit_overdue_days() -> int:
    value = getattr(settings, "FINANCE", {}).get("DEPOSIT_OVERDUE_DAYS")
    return int(value if value is not None else DEFAULT_DEPOSIT_OVERDUE_DAYS)


def _aging_bucket(days_overdue: int) -> str:
    if days_overdue <= 0:
        return "current"
    if days_overdue <= 30:
        return "1_30"
    if days_overdue <= 60:
        return "31_60"
    if days_overdue <= 90:
        return "61_90"
    return "90_plus"


# ============================================================
# RECEIPTS
# ============================================================


def _receipt_rollups(receipts, *, as_of: date) -> dict:
    by_status = {
        row["payment_status"]: {"count": row["count"], "amount": _q2(row["amount"])}
        for row in receipts.values("payment_status").annotate(count=Count("id"), amount=Sum("amount"))
    }
    by_payment_type = {
        row["payment_type"]: {"count": row["count"], "amount": _q2(row["amount"])}
        for row in receipts.values("payment_type").annotate(count=Count("id"), amount=Sum("amount"))
    }

    monthly = [
        {
            "month": row["month"].date() if hasattr(row["month"], "date") else row["month"],
            "count": row["count"],
            "amount": _q2(row["amount"]),
            "posted_amount": _q2(row["posted_amount"]),
            "unposted_amount": _q2(row["unposted_amount"]),
        }
        for row in receipts.annotate(month=TruncMonth("received_date"))
        .values("month")
        .annotate(
            count=Count("id"),
            amount=Sum("amount"),
            posted_amount=Sum("amount", filter=Q(is_posted=True)),
            unposted_amount=Sum("amount", filter=Q(is_posted=False)),
        )
        .order_by("month")
    ]

    # Pending deposits: received but not yet at the bank.
    pending = receipts.filter(payment_status=Receipt.STATUS_RECEIVED, deposit_date__isnull=True)
    overdue_after = _deposit_overdue_days()
    waits = [(as_of - r.received_date).days for r in pending.only("received_date")]
    pending_amount = pending.aggregate(total=Sum("amount"))["total"]
    pending_deposits = {
        "count": len(waits),
        "amount": _q2(pending_amount),
        "average_days_waiting": (
            (Decimal(sum(waits)) / len(waits)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            if waits
            else Decimal("0.0")
        ),
        "overdue_count": sum(1 for days in waits if days > overdue_after),
        "overdue_after_days": overdue_after,
    }

    # Coverage denominator: only receipts that have at least one allocation.
    allocated = receipts.filter(
        Exists(ReceiptAllocation.objects.filter(receipt_id=OuterRef("pk")))
    )
    allocated_receipt_total = allocated.aggregate(total=Sum("amount"))["total"] or ZERO
    allocated_sum = (
        ReceiptAllocation.objects.filter(receipt__in=allocated).aggregate(total=Sum("amount"))["total"]
        or ZERO
    )
    coverage = {
        "allocated_receipts": allocated.count(),
        "unallocated_receipts": receipts.count() - allocated.count(),
        "receipt_amount": _q2(allocated_receipt_total),
        "allocated_amount": _q2(allocated_sum),
        "coverage_ratio": (
            (allocated_sum / allocated_receipt_total).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
            if allocated_receipt_total
            else None
        ),
    }

    totals = receipts.aggregate(
        count=Count("id"),
        amount=Sum("amount"),
        posted=Count("id", filter=Q(is_posted=True)),
        unposted=Count("id", filter=Q(is_posted=False)),
    )

    return {
        "total_count": totals["count"],
        "total_amount": _q2(totals["amount"]),
        "posted_count": totals["posted"],
        "unposted_count": totals["unposted"],
        "by_status": by_status,
        "by_payment_type": by_payment_type,
        "monthly": monthly,
        "pending_deposits": pending_deposits,
        "allocation_coverage": coverage,
    }


# ============================================================
# INVOICES
# ============================================================


def _invoice_rollups(invoices, *, as_of: date) -> dict:
    by_status = {
        row["status"]: {
            "count": row["count"],
            "total_amount": _q2(row["total"]),
            "balance_amount": _q2(row["balance"]),
        }
        for row in invoices.values("status").annotate(
            count=Count("id"),
            total=Sum("total_amount"),
            balance=Sum("balance_amount"),
        )
    }

    aging: dict[int, dict] = {}
    open_rows = (
        invoices.exclude(status__in=Invoice.CLOSED_STATUSES)
        .filter(balance_amount__gt=0)
        .values("customer_id", "customer_name", "due_date", "balance_amount")
    )
    for row in open_rows:
        customer = aging.setdefault(
            row["customer_id"],
            {
                "customer_id": row["customer_id"],
                "customer_name": row["customer_name"],
                **{bucket: ZERO for bucket in AGING_BUCKETS},
                "total": ZERO,
            },
        )
        bucket = _aging_bucket((as_of - row["due_date"]).days)
        customer[bucket] = _q2(customer[bucket] + row["balance_amount"])
        customer["total"] = _q2(customer["total"] + row["balance_amount"])

    aging_totals = {bucket: ZERO for bucket in AGING_BUCKETS}
    for customer in aging.values():
        for bucket in AGING_BUCKETS:
            aging_totals[bucket] += customer[bucket]

    return {
        "by_status": by_status,
        "aging": sorted(aging.values(), key=lambda c: (-c["total"], c["customer_id"])),
        "aging_totals": aging_totals,
    }


# ============================================================
# VOUCHERS + LEASE REVENUE
# ============================================================


def _voucher_rollups(vouchers) -> dict:
    by_date = [
        {"posting_date": row["posting_date"], "count": row["count"], "amount": _q2(row["amount"])}
        for row in vouchers.values("posting_date")
        .annotate(count=Count("id"), amount=Sum("amount"))
        .order_by("posting_date")
    ]
    by_source_type = {
        row["source_type"]: {"count": row["count"], "amount": _q2(row["amount"])}
        for row in vouchers.values("source_type").annotate(count=Count("id"), amount=Sum("amount"))
    }
    return {
        "by_posting_date": by_date,
        "by_source_type": by_source_type,
        "reversal_count": vouchers.filter(is_reversal=True).count(),
    }


def _lease_revenue_rollups(postings) -> dict:
    totals = postings.aggregate(
        posted_count=Count("id", filter=Q(is_posted=True)),
        posted_amount=Sum("amount", filter=Q(is_posted=True)),
        unposted_count=Count("id", filter=Q(is_posted=False)),
    )
    return {
        "posted_count": totals["posted_count"],
        "posted_amount": _q2(totals["posted_amount"]),
        "unposted_count": totals["unposted_count"],
    }


def get_statistics(
    *,
    company_id: int | None = None,
    customer_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    as_of: date | None = None,
) -> dict:
    as_of = as_of or timezone.localdate()

    receipts = Receipt.objects.all()
    invoices = Invoice.objects.all()
    vouchers = Voucher.objects.all()
    postings = LeaseRevenuePosting.objects.all()

    if company_id is not None:
        receipts = receipts.filter(company_id=company_id)
        invoices = invoices.filter(company_id=company_id)
        vouchers = vouchers.filter(company_id=company_id)
        postings = postings.filter(contract_unit__contract__company_id=company_id)

    if customer_id is not None:
        receipts = receipts.filter(customer_id=customer_id)
        invoices = invoices.filter(customer_id=customer_id)
        postings = postings.filter(contract_unit__contract__customer_id=customer_id)

    if date_from:
        receipts = receipts.filter(received_date__gte=date_from)
        invoices = invoices.filter(invoice_date__gte=date_from)
        vouchers = vouchers.filter(posting_date__gte=date_from)
        postings = postings.filter(period_end__gte=date_from)
    if date_to:
        receipts = receipts.filter(received_date__lte=date_to)
        invoices = invoices.filter(invoice_date__lte=date_to)
        vouchers = vouchers.filter(posting_date__lte=date_to)
        postings = postings.filter(period_start__lte=date_to)

    lease_revenue = _lease_revenue_rollups(postings)
    if date_from and date_to:
        unposted = [
            entry
            for entry in list_entries(date_from, date_to, company_id=company_id)
            if customer_id is None or entry.customer_id == customer_id
        ]
        lease_revenue["period_unposted_count"] = len(unposted)
        lease_revenue["period_unposted_amount"] = _q2(sum((e.posting_amount for e in unposted), ZERO))

    return {
        "as_of": as_of,
        "filters": {
            "company_id": company_id,
            "customer_id": customer_id,
            "date_from": date_from,
            "date_to": date_to,
        },
        "receipts": _receipt_rollups(receipts, as_of=as_of),
        "invoices": _invoice_rollups(invoices, as_of=as_of),
        "vouchers": _voucher_rollups(vouchers),
        "lease_revenue": lease_revenue,
    }
