# leasing/api/serializers/bulk.py

from rest_framework import serializers


class BulkOperationSerializer(serializers.Serializer):
    operation_type = serializers.CharField()
    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    company_id = serializers.IntegerField(required=False, min_value=1)
    fiscal_year_id = serializers.IntegerField(required=False, allow_null=True)
