# leasing/api/serializers/statistics.py

from rest_framework import serializers


class StatisticsQuerySerializer(serializers.Serializer):
    company_id = serializers.IntegerField(required=False, min_value=1)
    customer_id = serializers.IntegerField(required=False, min_value=1)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    as_of = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get("date_from")
        end = attrs.get("date_to")
        if start and end and start > end:
            raise serializers.ValidationError({"date_to": "date_to must be >= date_from"})
        return attrs
