# leasing/models/__init__.py

"""
LEASING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
"""

from leasing.models.contract import Contract, ContractUnit
from leasing.models.invoice import Invoice
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.models.receipt import Receipt, ReceiptAllocation

__all__ = [
    "Contract",
    "ContractUnit",
    "Invoice",
    "Receipt",
    "ReceiptAllocation",
    "LeaseRevenuePosting",
]
