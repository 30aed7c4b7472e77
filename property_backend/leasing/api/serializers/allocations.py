# leasing/api/serializers/allocations.py

"""
======================================================
PATH: leasing/api/serializers/allocations.py
======================================================
ALLOCATION COMMAND SERIALIZERS

Shape only. Ids and amounts are passed through as text so the
allocation validator reports UnknownInvoice / NonPositiveAllocation
with its own codes instead of generic field errors.
"""

from rest_framework import serializers


class AllocationLineSerializer(serializers.Serializer):
    invoice_id = serializers.CharField(allow_null=True, allow_blank=True)
    amount = serializers.CharField(allow_null=True, allow_blank=True)


class AllocationValidateSerializer(serializers.Serializer):
    receipt_id = serializers.CharField()
    # Stand-in amount when the receipt is unknown (preview before save).
    amount = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    distribution = AllocationLineSerializer(many=True, allow_empty=True)
    company_id = serializers.IntegerField(required=False, min_value=1)


class AllocateSerializer(serializers.Serializer):
    receipt_id = serializers.CharField()
    distribution = AllocationLineSerializer(many=True, allow_empty=True)
    company_id = serializers.IntegerField(required=False, min_value=1)
