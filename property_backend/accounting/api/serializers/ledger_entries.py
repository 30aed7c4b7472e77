# accounting/api/serializers/ledger_entries.py

from rest_framework import serializers

from accounting.models.ledger import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    voucher_no = serializers.CharField(source="voucher.voucher_no", read_only=True)
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = LedgerEntry
        fields = (
            "id",
            "voucher",
            "voucher_no",
            "account",
            "account_code",
            "account_name",
            "entry_type",
            "amount",
            "created_at",
        )
        read_only_fields = fields
