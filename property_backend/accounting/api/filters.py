# accounting/api/filters.py

import django_filters

from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher


class VoucherFilter(django_filters.FilterSet):
    posting_date_from = django_filters.DateFilter(field_name="posting_date", lookup_expr="gte")
    posting_date_to = django_filters.DateFilter(field_name="posting_date", lookup_expr="lte")

    class Meta:
        model = Voucher
        fields = ["source_type", "source_id", "is_reversal", "company_id", "reference"]


class LedgerEntryFilter(django_filters.FilterSet):
    voucher_no = django_filters.CharFilter(field_name="voucher__voucher_no")

    class Meta:
        model = LedgerEntry
        fields = ["voucher", "account", "entry_type"]
