# accounting/api/engine_responses.py

"""
ENGINE → HTTP MAPPING

Shared by the accounting and leasing command endpoints.

- EngineValidationError        -> 400 {"errors": [{code, message, item_id?, field?}, ...]}
- ConcurrentModificationError  -> 409 {"errors": [{code: "ConcurrentModification", ...}]}
- IntegrityViolationError      -> 500 (logged; never a caller problem)

Context:
- actor_id comes from the authenticated user
- company_id comes from the payload, else FINANCE["DEFAULT_COMPANY_ID"]
"""

from __future__ import annotations

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    ConcurrentModificationError,
    EngineValidationError,
    IntegrityViolationError,
)

logger = logging.getLogger("ledger")


def default_company_id() -> int:
    return int(getattr(settings, "FINANCE", {}).get("DEFAULT_COMPANY_ID") or 1)


def build_context(request, *, company_id=None, fiscal_year_id=None) -> PostingContext:
    user = getattr(request, "user", None)
    return PostingContext(
        actor_id=getattr(user, "pk", None),
        company_id=company_id or default_company_id(),
        fiscal_year_id=fiscal_year_id,
    )


def forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


def engine_error_response(exc: Exception) -> Response:
    if isinstance(exc, EngineValidationError):
        return Response({"errors": exc.as_list()}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ConcurrentModificationError):
        return Response(
            {"errors": [{"code": exc.code, "message": str(exc)}]},
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, IntegrityViolationError):
        logger.error("Integrity violation surfaced to API", extra={"error": str(exc)})
        return Response(
            {"detail": "Ledger integrity check failed; the operation was rolled back."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    raise exc


ENGINE_ERRORS = (EngineValidationError, ConcurrentModificationError, IntegrityViolationError)
