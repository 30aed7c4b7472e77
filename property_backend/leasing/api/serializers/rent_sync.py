# leasing/api/serializers/rent_sync.py

from rest_framework import serializers


class RentSyncSerializer(serializers.Serializer):
    monthly_rent = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    yearly_rent = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    installment_count = serializers.IntegerField(required=False, allow_null=True, min_value=0)
