# leasing/tests/helpers.py

"""
Shared fixtures for the accounting + leasing test suites.

Everything is built through the real model save() paths (full_clean),
so fixtures obey the same invariants as production rows.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.services.context import PostingContext
from leasing.models.contract import Contract, ContractUnit
from leasing.models.invoice import Invoice
from leasing.models.receipt import Receipt

COMPANY_ID = 1
CUSTOMER_ID = 10

# A Friday inside FY2024: no weekend / future / stale warnings.
TODAY = date(2024, 6, 14)


def make_accounts() -> dict[str, Account]:
    rows = [
        ("CASH", "1000", "Cash on Hand", Account.ASSET),
        ("BANK", "1010", "Bank Account", Account.ASSET),
        ("RENT_RECEIVABLE", "1100", "Rent Receivable", Account.ASSET),
        ("UNEARNED_RENT", "2200", "Unearned Rent", Account.LIABILITY),
        ("RENTAL_INCOME", "4100", "Rental Income", Account.REVENUE),
    ]
    return {
        role: Account.objects.create(code=code, name=name, account_type=account_type)
        for role, code, name, account_type in rows
    }


def make_fiscal_year(*, year: int = 2024, is_closed: bool = False, company_id: int = COMPANY_ID) -> FiscalYear:
    return FiscalYear.objects.create(
        company_id=company_id,
        code=f"FY{year}",
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        is_closed=is_closed,
    )


def make_context(*, today: date = TODAY, company_id: int = COMPANY_ID, fiscal_year_id=None, actor_id=None):
    return PostingContext(
        actor_id=actor_id,
        company_id=company_id,
        fiscal_year_id=fiscal_year_id,
        today=today,
    )


def make_contract(contract_no: str = "LC-001", *, customer_id: int = CUSTOMER_ID) -> Contract:
    return Contract.objects.create(
        contract_no=contract_no,
        customer_id=customer_id,
        customer_name=f"Customer {customer_id}",
        company_id=COMPANY_ID,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
    )


def make_unit(
    contract: Contract,
    unit_no: str = "U-101",
    *,
    yearly_rent=Decimal("36500.00"),
    monthly_rent=None,
    installment_count=None,
    lease_start: date = date(2024, 1, 1),
    lease_end: date = date(2024, 12, 31),
) -> ContractUnit:
    return ContractUnit.objects.create(
        contract=contract,
        unit_no=unit_no,
        monthly_rent=monthly_rent,
        yearly_rent=yearly_rent,
        installment_count=installment_count,
        lease_start=lease_start,
        lease_end=lease_end,
    )


def make_invoice(
    invoice_no: str,
    total,
    *,
    customer_id: int = CUSTOMER_ID,
    status: str = Invoice.STATUS_DRAFT,
    due_date: date = date(2024, 6, 1),
    paid=Decimal("0.00"),
) -> Invoice:
    return Invoice.objects.create(
        invoice_no=invoice_no,
        customer_id=customer_id,
        customer_name=f"Customer {customer_id}",
        company_id=COMPANY_ID,
        invoice_date=date(2024, 5, 1),
        due_date=due_date,
        gross_amount=Decimal(str(total)),
        paid_amount=Decimal(str(paid)),
        status=status,
    )


def make_receipt(
    receipt_no: str,
    amount,
    *,
    customer_id: int = CUSTOMER_ID,
    payment_type: str = Receipt.TYPE_CASH,
    received_date: date = date(2024, 6, 10),
    **extra,
) -> Receipt:
    if payment_type == Receipt.TYPE_CHEQUE:
        extra.setdefault("cheque_no", f"CHQ-{receipt_no}")
    return Receipt.objects.create(
        receipt_no=receipt_no,
        customer_id=customer_id,
        customer_name=f"Customer {customer_id}",
        company_id=COMPANY_ID,
        amount=Decimal(str(amount)),
        payment_type=payment_type,
        received_date=received_date,
        **extra,
    )
