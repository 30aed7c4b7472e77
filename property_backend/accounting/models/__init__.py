# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher, VoucherSequence

__all__ = [
    "Account",
    "FiscalYear",
    "Voucher",
    "VoucherSequence",
    "LedgerEntry",
]
