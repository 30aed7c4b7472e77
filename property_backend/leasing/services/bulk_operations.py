# leasing/services/bulk_operations.py

"""
======================================================
PATH: leasing/services/bulk_operations.py
======================================================
BULK OPERATION COORDINATOR

apply_bulk(operation_type, items) runs one single-item engine call per item.

Rules:
- Each item is its own atomic unit (the engines own their transactions)
- Caller-correctable failures (validation, lost races) are recorded per
  item and the loop moves on; the batch is NOT rolled back
- IntegrityViolationError aborts the batch: items already committed stay
- is_cancelled() is polled before each item; the rest are counted as skipped

Operations:
- Post            -> accounting.services.posting.post
- ChangeStatus    -> receipt_status.change_receipt_status
- SetDepositInfo  -> receipt_status.set_deposit_info
- Allocate        -> allocation_service.allocate
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date

from django.utils.dateparse import parse_date

from accounting.services import posting
from accounting.services.context import PostingContext
from accounting.services.exceptions import (
    CONCURRENT_MODIFICATION,
    INVALID_DATE,
    UNKNOWN_OPERATION,
    ConcurrentModificationError,
    EngineError,
    EngineValidationError,
)
from leasing.services import allocation_service, receipt_status

logger = logging.getLogger("receivables")

OP_POST = "Post"
OP_CHANGE_STATUS = "ChangeStatus"
OP_SET_DEPOSIT_INFO = "SetDepositInfo"
OP_ALLOCATE = "Allocate"


@dataclass(frozen=True)
class BulkItemError:
    item_id: object
    errors: list[EngineError]

    def as_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "errors": [e.as_dict() for e in self.errors],
        }


@dataclass
class BulkResult:
    updated_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    per_item_errors: list[BulkItemError] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "updated_count": self.updated_count,
            "failed_count": self.failed_count,
            "skipped_count": self.skipped_count,
            "per_item_errors": [e.as_dict() for e in self.per_item_errors],
        }


def _as_date(item: Mapping, key: str) -> date | None:
    value = item.get(key)
    if value is None or value == "" or isinstance(value, date):
        return value or None
    try:
        parsed = parse_date(str(value))
    except ValueError:
        # Well-formed but impossible, e.g. 2024-02-30.
        parsed = None
    if parsed is None:
        raise EngineValidationError(
            [EngineError(INVALID_DATE, f"{key} {value!r} is not a valid date", _item_id(item), key)]
        )
    return parsed


# ============================================================
# SINGLE-ITEM HANDLERS
# ============================================================


def _post(item: Mapping, context: PostingContext):
    return posting.post(
        source_type=item.get("source_type"),
        source_id=item.get("source_id"),
        posting_date=_as_date(item, "posting_date"),
        debit_account_id=item.get("debit_account_id"),
        credit_account_id=item.get("credit_account_id"),
        amount=item.get("amount"),
        narration=item.get("narration") or "",
        reference=item.get("reference"),
        context=context,
    )


def _change_status(item: Mapping, context: PostingContext):
    return receipt_status.change_receipt_status(
        item.get("receipt_id"),
        item.get("status"),
        clearance_date=_as_date(item, "clearance_date"),
        context=context,
    )


def _set_deposit_info(item: Mapping, context: PostingContext):
    return receipt_status.set_deposit_info(
        item.get("receipt_id"),
        deposit_date=_as_date(item, "deposit_date"),
        deposit_bank=item.get("deposit_bank") or "",
        context=context,
    )


def _allocate(item: Mapping, context: PostingContext):
    return allocation_service.allocate(
        item.get("receipt_id"),
        item.get("distribution") or [],
        context=context,
    )


HANDLERS: dict[str, Callable[[Mapping, PostingContext], object]] = {
    OP_POST: _post,
    OP_CHANGE_STATUS: _change_status,
    OP_SET_DEPOSIT_INFO: _set_deposit_info,
    OP_ALLOCATE: _allocate,
}


def _item_id(item: Mapping):
    for key in ("source_id", "receipt_id", "voucher_no"):
        if item.get(key) not in (None, ""):
            return item[key]
    return None


# ============================================================
# COORDINATOR
# ============================================================


def apply_bulk(
    operation_type: str,
    items: Iterable[Mapping],
    *,
    context: PostingContext,
    is_cancelled: Callable[[], bool] | None = None,
) -> BulkResult:
    handler = HANDLERS.get(operation_type)
    if handler is None:
        raise EngineValidationError(
            [
                EngineError(
                    UNKNOWN_OPERATION,
                    f"Unknown bulk operation {operation_type!r}; expected one of {', '.join(HANDLERS)}",
                    field="operation_type",
                )
            ]
        )

    items = list(items)
    result = BulkResult()

    for index, item in enumerate(items):
        if is_cancelled is not None and is_cancelled():
            result.skipped_count = len(items) - index
            logger.warning(
                "Bulk operation cancelled",
                extra={"operation_type": operation_type, "skipped": result.skipped_count},
            )
            break

        item_id = _item_id(item)
        try:
            handler(item, context)
        except EngineValidationError as exc:
            result.failed_count += 1
            result.per_item_errors.append(BulkItemError(item_id, exc.errors))
        except ConcurrentModificationError as exc:
            result.failed_count += 1
            result.per_item_errors.append(
                BulkItemError(item_id, [EngineError(CONCURRENT_MODIFICATION, str(exc), item_id)])
            )
        else:
            result.updated_count += 1

    logger.info(
        "Bulk operation applied",
        extra={
            "operation_type": operation_type,
            "updated": result.updated_count,
            "failed": result.failed_count,
            "skipped": result.skipped_count,
            "actor_id": context.actor_id,
        },
    )
    return result
