# accounting/api/views/__init__.py

"""
accounting.api.views package

Important:
- ViewSets are defined in accounting.api.view (singular) in this codebase.
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.view import LedgerEntryViewSet, VoucherViewSet
from accounting.api.views.postings import (
    PostingCreateView,
    PostingValidateView,
    VoucherReverseView,
)

__all__ = [
    "LedgerEntryViewSet",
    "VoucherViewSet",
    "PostingCreateView",
    "PostingValidateView",
    "VoucherReverseView",
]
