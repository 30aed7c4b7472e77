# leasing/api/urls.py

from django.urls import path

from leasing.api.views import (
    AllocationCreateView,
    AllocationValidateView,
    BulkOperationView,
    LeaseRevenueEntriesView,
    RentSyncView,
    StatisticsView,
)

urlpatterns = [
    # Receipt allocation
    path("allocations/", AllocationCreateView.as_view(), name="allocation-create"),
    path("allocations/validate/", AllocationValidateView.as_view(), name="allocation-validate"),
    # Batch jobs
    path("bulk/", BulkOperationView.as_view(), name="bulk-operations"),
    # Reports
    path("statistics/", StatisticsView.as_view(), name="leasing-statistics"),
    path("lease-revenue/", LeaseRevenueEntriesView.as_view(), name="lease-revenue"),
    # Calculators
    path("rent-sync/", RentSyncView.as_view(), name="rent-sync"),
]
