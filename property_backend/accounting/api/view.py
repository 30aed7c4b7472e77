# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

ACCOUNTING API VIEWSETS (READ-ONLY / AUDIT SAFE)

- Vouchers and ledger entries are append-only; these endpoints never write
- Permission-gated via Django permissions (no role hardcoding)
- Filtering through django-filter:
    /api/accounting/vouchers/?source_type=RECEIPT&source_id=12
    /api/accounting/vouchers/?is_reversal=true
    /api/accounting/ledger-entries/?voucher=30&account=28

Security rules:
- Voucher list requires accounting.view_voucher
- LedgerEntry list requires accounting.view_ledgerentry
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.filters import LedgerEntryFilter, VoucherFilter
from accounting.api.serializers import LedgerEntrySerializer, VoucherSerializer
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher


@extend_schema(tags=["accounting"])
class VoucherViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to vouchers with both legs inlined.

    Lookup is by voucher number: /api/accounting/vouchers/RCV-2024-000001/
    """

    permission_classes = [IsAuthenticated]
    serializer_class = VoucherSerializer
    http_method_names = ["get", "head", "options"]
    lookup_field = "voucher_no"

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = VoucherFilter
    ordering_fields = ["posting_date", "created_at", "voucher_no"]
    ordering = ["-posting_date", "-id"]

    queryset = Voucher.objects.select_related("reversal_of", "reversed_by").prefetch_related(
        "ledger_entries__account"
    )

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_voucher"):
            raise PermissionDenied("You do not have permission to view vouchers.")
        return super().get_queryset()


@extend_schema(tags=["accounting"])
class LedgerEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to ledger entries (append-only, audit-safe).
    """

    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer
    http_method_names = ["get", "head", "options"]

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = LedgerEntryFilter
    ordering_fields = ["created_at"]
    ordering = ["-created_at", "-id"]

    queryset = LedgerEntry.objects.select_related("voucher", "account")

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_ledgerentry"):
            raise PermissionDenied("You do not have permission to view ledger entries.")
        return super().get_queryset()
