# PATH: leasing/api/views/bulk.py

"""
PATH: leasing/api/views/bulk.py

BULK OPERATIONS API

POST /api/leasing/bulk/
    {"operation_type": "Post" | "ChangeStatus" | "SetDepositInfo" | "Allocate",
     "items": [{...}, ...]}

- Permission depends on the operation (same as the single-item endpoint)
- Always 200 once the batch ran, even with failed items:
  {updated_count, failed_count, skipped_count, per_item_errors[]}
- 400 only for an unknown operation_type
"""

from drf_spectacular.utils import extend_schema
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.engine_responses import (
    ENGINE_ERRORS,
    build_context,
    engine_error_response,
    forbidden,
)
from leasing.api.serializers import BulkOperationSerializer
from leasing.services.bulk_operations import (
    OP_ALLOCATE,
    OP_CHANGE_STATUS,
    OP_POST,
    OP_SET_DEPOSIT_INFO,
    apply_bulk,
)

BULK_PERMISSIONS = {
    OP_POST: "accounting.add_voucher",
    OP_CHANGE_STATUS: "leasing.change_receipt",
    OP_SET_DEPOSIT_INFO: "leasing.change_receipt",
    OP_ALLOCATE: "leasing.add_receiptallocation",
}


class BulkOperationView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = BulkOperationSerializer

    @extend_schema(
        tags=["leasing"],
        request=BulkOperationSerializer,
        responses={200: dict, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        permission = BULK_PERMISSIONS.get(data["operation_type"])
        if permission and not request.user.has_perm(permission):
            return forbidden("You do not have permission to run this bulk operation.")

        context = build_context(
            request,
            company_id=data.get("company_id"),
            fiscal_year_id=data.get("fiscal_year_id"),
        )
        try:
            result = apply_bulk(data["operation_type"], data["items"], context=context)
        except ENGINE_ERRORS as exc:
            return engine_error_response(exc)

        return Response(result.as_dict())
