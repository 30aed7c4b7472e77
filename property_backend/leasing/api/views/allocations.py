# PATH: leasing/api/views/allocations.py

"""
PATH: leasing/api/views/allocations.py

RECEIPT ALLOCATION API

POST /api/leasing/allocations/validate/
    - Requires leasing.view_invoice
    - {is_valid, errors[], warnings[], total_allocated}; never writes

POST /api/leasing/allocations/
    - Requires leasing.add_receiptallocation
    - All-or-nothing per receipt
    - 201 {receipt_id, total_allocated, unallocated_remainder, allocation_ids}
    - 400 {"errors": [...]} with every problem found; 409 on a lost race
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.engine_responses import (
    ENGINE_ERRORS,
    build_context,
    engine_error_response,
    forbidden,
)
from leasing.api.serializers import AllocateSerializer, AllocationValidateSerializer
from leasing.services.allocation_service import allocate
from leasing.services.allocation_validator import validate_allocation

VALIDATE_PERMISSION = "leasing.view_invoice"
ALLOCATE_PERMISSION = "leasing.add_receiptallocation"


class AllocationValidateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AllocationValidateSerializer

    @extend_schema(
        tags=["leasing"],
        request=AllocationValidateSerializer,
        responses={200: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(VALIDATE_PERMISSION):
            return forbidden("You do not have permission to validate allocations.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_context(request, company_id=data.get("company_id"))
        result = validate_allocation(
            data["receipt_id"],
            data.get("amount"),
            data["distribution"],
            company_id=context.company_id,
        )
        return Response(result)


class AllocationCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AllocateSerializer

    @extend_schema(
        tags=["leasing"],
        request=AllocateSerializer,
        responses={201: dict, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ALLOCATE_PERMISSION):
            return forbidden("You do not have permission to allocate receipts.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_context(request, company_id=data.get("company_id"))
        try:
            result = allocate(data["receipt_id"], data["distribution"], context=context)
        except ENGINE_ERRORS as exc:
            return engine_error_response(exc)

        return Response(result.as_dict(), status=status.HTTP_201_CREATED)
