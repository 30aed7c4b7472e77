# leasing/api/serializers/lease_revenue.py

from rest_framework import serializers


class LeaseRevenueQuerySerializer(serializers.Serializer):
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    company_id = serializers.IntegerField(required=False, min_value=1)
    unposted_only = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        if attrs["period_start"] > attrs["period_end"]:
            raise serializers.ValidationError({"period_end": "period_end must be >= period_start"})
        return attrs
