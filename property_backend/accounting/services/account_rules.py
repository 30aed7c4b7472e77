# accounting/services/account_rules.py

"""
LEDGER ACCOUNT RULES

Pure structural rules shared by every entry point (API, bulk, commands):
- debit and credit accounts must both be present
- debit and credit accounts must differ
- amounts must be strictly positive and fit the amount columns

Existence / active-status checks are delegated to an account lookup
collaborator; pass lookup=None to run the structural rules only.
"""

from __future__ import annotations

from accounting.models.account import Account
from accounting.services.exceptions import AMOUNT_OUT_OF_RANGE, INVALID_ACCOUNT_PAIR, EngineError
from accounting.services.money import MAX_AMOUNT, is_out_of_range


class AccountLookup:
    """Account master backed by the Account table."""

    def get(self, account_id) -> Account | None:
        try:
            return Account.objects.filter(pk=int(account_id)).first()
        except (TypeError, ValueError):
            return None


def _norm_id(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def check_account_pair(
    debit_account_id,
    credit_account_id,
    *,
    lookup: AccountLookup | None = None,
    item_id=None,
) -> list[EngineError]:
    """Empty list means the pair is valid."""
    debit = _norm_id(debit_account_id)
    credit = _norm_id(credit_account_id)

    errors: list[EngineError] = []
    if not debit:
        errors.append(
            EngineError(INVALID_ACCOUNT_PAIR, "Debit account is required", item_id, "debit_account_id")
        )
    if not credit:
        errors.append(
            EngineError(INVALID_ACCOUNT_PAIR, "Credit account is required", item_id, "credit_account_id")
        )
    if errors:
        return errors

    if debit == credit:
        return [
            EngineError(
                INVALID_ACCOUNT_PAIR,
                "Debit and credit accounts must be different",
                item_id,
                "credit_account_id",
            )
        ]

    if lookup is None:
        return errors

    for field, label, account_id in (
        ("debit_account_id", "Debit", debit),
        ("credit_account_id", "Credit", credit),
    ):
        account = lookup.get(account_id)
        if account is None:
            errors.append(
                EngineError(INVALID_ACCOUNT_PAIR, f"{label} account {account_id} does not exist", item_id, field)
            )
        elif not account.is_active:
            errors.append(
                EngineError(INVALID_ACCOUNT_PAIR, f"{label} account {account.code} is inactive", item_id, field)
            )
        elif not account.is_postable:
            errors.append(
                EngineError(INVALID_ACCOUNT_PAIR, f"{label} account {account.code} is not postable", item_id, field)
            )

    return errors


def check_amount_sign(amount, *, code: str, item_id=None, field: str = "amount") -> list[EngineError]:
    if amount is None or amount <= 0:
        return [EngineError(code, "Amount must be greater than zero", item_id, field)]
    if is_out_of_range(amount):
        return [EngineError(AMOUNT_OUT_OF_RANGE, f"Amount exceeds the maximum of {MAX_AMOUNT}", item_id, field)]
    return []
