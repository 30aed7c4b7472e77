# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# Canonical ViewSets live in accounting/api/view.py (singular) in this project.
# We import directly to avoid circular imports through views/__init__.py.
from accounting.api.view import LedgerEntryViewSet, VoucherViewSet
from accounting.api.views.postings import (
    PostingCreateView,
    PostingValidateView,
    VoucherReverseView,
)

router = DefaultRouter()
router.register("vouchers", VoucherViewSet, basename="voucher")
router.register("ledger-entries", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    # Posting actions (before the router so "vouchers/<no>/reverse/" wins)
    path("postings/", PostingCreateView.as_view(), name="posting-create"),
    path("postings/validate/", PostingValidateView.as_view(), name="posting-validate"),
    path(
        "vouchers/<str:voucher_no>/reverse/",
        VoucherReverseView.as_view(),
        name="voucher-reverse",
    ),
    # Router endpoints
    path("", include(router.urls)),
]
