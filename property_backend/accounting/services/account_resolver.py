# accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER

Answers: "Which account carries this semantic role?"

Semantic roles map to account codes through settings.FINANCE["ACCOUNT_CODES"],
so batch jobs (lease revenue posting) never hardcode ids.
Hard-fails on missing setup so we never post to the wrong account.
"""

from __future__ import annotations

import logging

from django.conf import settings

from accounting.models.account import Account
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

DEFAULT_CODES = {
    "CASH": "1000",
    "BANK": "1010",
    "CHEQUES_UNDER_COLLECTION": "1020",
    "RENT_RECEIVABLE": "1100",
    "VAT_PAYABLE": "2100",
    "UNEARNED_RENT": "2200",
    "RENTAL_INCOME": "4100",
}


def code_for(role: str) -> str:
    configured = getattr(settings, "FINANCE", {}).get("ACCOUNT_CODES") or {}
    code = configured.get(role) or DEFAULT_CODES.get(role)
    if not code:
        raise AccountResolutionError(f"No account code configured for role {role}")
    return code


def get_account_by_code(code: str) -> Account:
    code = (code or "").strip()
    if not code:
        raise AccountResolutionError("Account code is required")

    try:
        return Account.objects.get(code=code, is_active=True)
    except Account.DoesNotExist as exc:
        logger.error("Account resolution failed: account not found", extra={"account_code": code})
        raise AccountResolutionError(
            f"Active account with code={code} not found. Run seed_lease_chart first."
        ) from exc


def get_account_for_role(role: str) -> Account:
    return get_account_by_code(code_for(role))
