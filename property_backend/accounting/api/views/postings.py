# PATH: accounting/api/views/postings.py

"""
PATH: accounting/api/views/postings.py

POSTING + REVERSAL API

POST /api/accounting/postings/
    - Requires accounting.add_voucher
    - Posts one source record (receipt / invoice / lease revenue entry)
    - 201 with the voucher; 400 {"errors": [...]} with EVERY problem found

POST /api/accounting/postings/validate/
    - Requires accounting.add_voucher
    - Dry run: {is_valid, errors, warnings}; never writes

POST /api/accounting/vouchers/<voucher_no>/reverse/
    - Requires accounting.reverse_voucher
    - 201 with the reversing voucher
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
from accounting.api.serializers import (
    PostingSerializer,
    ReversalSerializer,
    VoucherSerializer,
)
from accounting.services.posting import post, validate_posting
from accounting.services.reversal import reverse

POST_PERMISSION = "accounting.add_voucher"
REVERSE_PERMISSION = "accounting.reverse_voucher"


def _posting_kwargs(data) -> dict:
    return {
        "source_type": data["source_type"],
        "source_id": data["source_id"],
        "posting_date": data.get("posting_date"),
        "debit_account_id": data.get("debit_account_id"),
        "credit_account_id": data.get("credit_account_id"),
        "amount": data.get("amount"),
    }


class PostingCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PostingSerializer

    @extend_schema(
        tags=["accounting"],
        request=PostingSerializer,
        responses={201: VoucherSerializer, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return forbidden("You do not have permission to post vouchers.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_context(
            request,
            company_id=data.get("company_id"),
            fiscal_year_id=data.get("fiscal_year_id"),
        )

        try:
            voucher = post(
                **_posting_kwargs(data),
                narration=data.get("narration") or "",
                reference=data.get("reference"),
                context=context,
            )
        except ENGINE_ERRORS as exc:
            return engine_error_response(exc)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


class PostingValidateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PostingSerializer

    @extend_schema(
        tags=["accounting"],
        request=PostingSerializer,
        responses={200: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(POST_PERMISSION):
            return forbidden("You do not have permission to post vouchers.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_context(
            request,
            company_id=data.get("company_id"),
            fiscal_year_id=data.get("fiscal_year_id"),
        )
        return Response(validate_posting(**_posting_kwargs(data), context=context))


class VoucherReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReversalSerializer

    @extend_schema(
        tags=["accounting"],
        request=ReversalSerializer,
        responses={201: VoucherSerializer, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, voucher_no: str, *args, **kwargs):
        if not request.user.has_perm(REVERSE_PERMISSION):
            return forbidden("You do not have permission to reverse vouchers.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        context = build_context(
            request,
            company_id=data.get("company_id"),
            fiscal_year_id=data.get("fiscal_year_id"),
        )

        try:
            reversal = reverse(voucher_no=voucher_no, reason=data.get("reason") or "", context=context)
        except ENGINE_ERRORS as exc:
            return engine_error_response(exc)

        return Response(VoucherSerializer(reversal).data, status=status.HTTP_201_CREATED)
