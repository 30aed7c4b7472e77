# accounting/services/voucher_numbers.py

"""
VOUCHER NUMBER ALLOCATION

Format: <PREFIX>-<YYYY>-<NNNNNN>  (e.g. RCV-2026-000042)

Must be called inside the posting transaction: the sequence row is
locked, so the number is only consumed if the voucher commits.
"""

from __future__ import annotations

from django.conf import settings
from django.db import transaction
from django.db.models import F

from accounting.models.voucher import VoucherSequence

DEFAULT_PREFIXES = {
    "RECEIPT": "RCV",
    "LEASE_REVENUE": "LRV",
    "INVOICE": "INV",
    "REVERSAL": "REV",
}


def prefix_for(kind: str) -> str:
    configured = getattr(settings, "FINANCE", {}).get("VOUCHER_PREFIXES") or {}
    return configured.get(kind) or DEFAULT_PREFIXES[kind]


def next_voucher_no(*, kind: str, year: int) -> str:
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("next_voucher_no() must run inside a transaction")

    prefix = prefix_for(kind)
    seq, _ = VoucherSequence.objects.select_for_update().get_or_create(
        prefix=prefix,
        year=year,
    )
    VoucherSequence.objects.filter(pk=seq.pk).update(last_number=F("last_number") + 1)
    seq.refresh_from_db(fields=["last_number"])

    return f"{prefix}-{year}-{seq.last_number:06d}"
