# PATH: leasing/api/views/rent_sync.py

"""
POST /api/leasing/rent-sync/

Preview of the rent synchronizer for contract unit forms.
No database access. Requires leasing.view_contractunit.
"""

from drf_spectacular.utils import extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.engine_responses import forbidden
from leasing.api.serializers import RentSyncSerializer
from leasing.services.rent_sync import synchronize_rent

RENT_SYNC_PERMISSION = "leasing.view_contractunit"


class RentSyncView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = RentSyncSerializer

    @extend_schema(
        tags=["leasing"],
        request=RentSyncSerializer,
        responses={200: dict, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(RENT_SYNC_PERMISSION):
            return forbidden("You do not have permission to use the rent calculator.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        terms = synchronize_rent(
            monthly_rent=data.get("monthly_rent"),
            yearly_rent=data.get("yearly_rent"),
            installment_count=data.get("installment_count"),
        )
        return Response(terms.as_dict())
