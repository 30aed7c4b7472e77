# PATH: leasing/api/views/lease_revenue.py

"""
GET /api/leasing/lease-revenue/?period_start=&period_end=&unposted_only=true

Lease revenue entries computed on demand for a period.
Each entry's source_id is what POST /api/accounting/postings/ expects
with source_type=LEASE_REVENUE.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.engine_responses import default_company_id, forbidden
from accounting.services.money import ZERO
from leasing.api.serializers import LeaseRevenueQuerySerializer
from leasing.services.lease_revenue import list_entries

LEASE_REVENUE_PERMISSION = "leasing.view_leaserevenueposting"


class LeaseRevenueEntriesView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = LeaseRevenueQuerySerializer

    @extend_schema(
        tags=["leasing"],
        parameters=[
            OpenApiParameter("period_start", str, required=True, description="YYYY-MM-DD"),
            OpenApiParameter("period_end", str, required=True, description="YYYY-MM-DD"),
            OpenApiParameter("company_id", int, required=False),
            OpenApiParameter("unposted_only", bool, required=False),
        ],
        responses={200: dict, 400: dict, 403: dict},
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(LEASE_REVENUE_PERMISSION):
            return forbidden("You do not have permission to view lease revenue.")

        serializer = self.get_serializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entries = list_entries(
            data["period_start"],
            data["period_end"],
            company_id=data.get("company_id") or default_company_id(),
            unposted_only=data["unposted_only"],
        )
        return Response(
            {
                "period_start": data["period_start"],
                "period_end": data["period_end"],
                "count": len(entries),
                "total_posting_amount": sum((e.posting_amount for e in entries), ZERO),
                "entries": [e.as_dict() for e in entries],
            }
        )
