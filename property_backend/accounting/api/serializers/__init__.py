# accounting/api/serializers/__init__.py

from accounting.api.serializers.ledger_entries import LedgerEntrySerializer
from accounting.api.serializers.postings import PostingSerializer, ReversalSerializer
from accounting.api.serializers.vouchers import VoucherSerializer

__all__ = [
    "LedgerEntrySerializer",
    "PostingSerializer",
    "ReversalSerializer",
    "VoucherSerializer",
]
