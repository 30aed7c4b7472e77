# leasing/api/serializers/__init__.py

from leasing.api.serializers.allocations import (
    AllocateSerializer,
    AllocationLineSerializer,
    AllocationValidateSerializer,
)
from leasing.api.serializers.bulk import BulkOperationSerializer
from leasing.api.serializers.lease_revenue import LeaseRevenueQuerySerializer
from leasing.api.serializers.rent_sync import RentSyncSerializer
from leasing.api.serializers.statistics import StatisticsQuerySerializer

__all__ = [
    "AllocateSerializer",
    "AllocationLineSerializer",
    "AllocationValidateSerializer",
    "BulkOperationSerializer",
    "LeaseRevenueQuerySerializer",
    "RentSyncSerializer",
    "StatisticsQuerySerializer",
]
