# accounting/api/serializers/vouchers.py

from rest_framework import serializers

from accounting.api.serializers.ledger_entries import LedgerEntrySerializer
from accounting.models.voucher import Voucher


class VoucherSerializer(serializers.ModelSerializer):
    ledger_entries = LedgerEntrySerializer(many=True, read_only=True)
    reversal_of_no = serializers.CharField(source="reversal_of.voucher_no", read_only=True, default=None)
    reversed_by_no = serializers.CharField(source="reversed_by.voucher_no", read_only=True, default=None)

    class Meta:
        model = Voucher
        fields = (
            "id",
            "voucher_no",
            "posting_date",
            "narration",
            "source_type",
            "source_id",
            "reference",
            "amount",
            "is_reversal",
            "reversal_of",
            "reversal_of_no",
            "root_voucher",
            "reversal_depth",
            "reversed_by",
            "reversed_by_no",
            "reversal_reason",
            "company_id",
            "fiscal_year",
            "created_by_id",
            "created_at",
            "ledger_entries",
        )
        read_only_fields = fields
