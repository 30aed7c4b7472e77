# leasing/api/views/__init__.py

from leasing.api.views.allocations import AllocationCreateView, AllocationValidateView
from leasing.api.views.bulk import BulkOperationView
from leasing.api.views.lease_revenue import LeaseRevenueEntriesView
from leasing.api.views.rent_sync import RentSyncView
from leasing.api.views.statistics import StatisticsView

__all__ = [
    "AllocationCreateView",
    "AllocationValidateView",
    "BulkOperationView",
    "LeaseRevenueEntriesView",
    "RentSyncView",
    "StatisticsView",
]
