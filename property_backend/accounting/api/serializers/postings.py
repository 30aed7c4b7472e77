# accounting/api/serializers/postings.py

"""
======================================================
PATH: accounting/api/serializers/postings.py
======================================================
POSTING + REVERSAL COMMAND SERIALIZERS

Shape-only validation. Business rules (account pair, source state,
period lock, amount sign) live in the engines so the validate endpoint
and the post endpoint report the same error codes.
"""

from rest_framework import serializers


class PostingSerializer(serializers.Serializer):
    # Free text: the engine reports UnknownSource for unsupported types.
    source_type = serializers.CharField(max_length=20)
    source_id = serializers.CharField(max_length=64)
    posting_date = serializers.DateField(required=False, allow_null=True)
    debit_account_id = serializers.IntegerField(required=False, allow_null=True)
    credit_account_id = serializers.IntegerField(required=False, allow_null=True)
    # Kept as a string: the engine reports NonPositiveAmount itself.
    amount = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    narration = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    company_id = serializers.IntegerField(required=False, min_value=1)
    fiscal_year_id = serializers.IntegerField(required=False, allow_null=True)


class ReversalSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    company_id = serializers.IntegerField(required=False, min_value=1)
    fiscal_year_id = serializers.IntegerField(required=False, allow_null=True)
