# PATH: leasing/api/views/statistics.py

"""
GET /api/leasing/statistics/?company_id=&customer_id=&date_from=&date_to=&as_of=

Read-only dashboard rollups. Requires leasing.view_receipt.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.engine_responses import default_company_id, forbidden
from leasing.api.serializers import StatisticsQuerySerializer
from leasing.services.statistics import get_statistics

STATISTICS_PERMISSION = "leasing.view_receipt"


class StatisticsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StatisticsQuerySerializer

    @extend_schema(
        tags=["leasing"],
        parameters=[
            OpenApiParameter("company_id", int, required=False),
            OpenApiParameter("customer_id", int, required=False),
            OpenApiParameter("date_from", str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter("date_to", str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter("as_of", str, required=False, description="YYYY-MM-DD (aging/deposit clock)"),
        ],
        responses={200: dict, 400: dict, 403: dict},
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(STATISTICS_PERMISSION):
            return forbidden("You do not have permission to view receivables statistics.")

        serializer = self.get_serializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        return Response(
            get_statistics(
                company_id=data.get("company_id") or default_company_id(),
                customer_id=data.get("customer_id"),
                date_from=data.get("date_from"),
                date_to=data.get("date_to"),
                as_of=data.get("as_of"),
            )
        )
