# leasing/tests/test_statistics.py

from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings

from accounting.models.voucher import Voucher
from accounting.services.posting import post
from leasing.models.invoice import Invoice
from leasing.models.receipt import Receipt
from leasing.services.allocation_service import allocate
from leasing.services.statistics import get_statistics
from leasing.tests.helpers import (
    CUSTOMER_ID,
    TODAY,
    make_accounts,
    make_context,
    make_contract,
    make_fiscal_year,
    make_invoice,
    make_receipt,
    make_unit,
)


class StatisticsTests(TestCase):
    def setUp(self):
        self.accounts = make_accounts()
        make_fiscal_year()
        self.context = make_context()

        self.cash = make_receipt("RC-1", "1000.00", received_date=date(2024, 5, 20))
        self.cheque = make_receipt(
            "RC-2",
            "500.00",
            payment_type=Receipt.TYPE_CHEQUE,
            received_date=date(2024, 6, 10),
        )
        self.other = make_receipt("RC-3", "200.00", customer_id=11, received_date=date(2024, 6, 12))

        self.invoice = make_invoice("INV-1", "1200.00", due_date=date(2024, 5, 1))
        make_invoice("INV-2", "300.00", customer_id=11, due_date=date(2024, 6, 30))

        post(
            source_type=Voucher.SOURCE_RECEIPT,
            source_id=self.cash.pk,
            posting_date=TODAY,
            debit_account_id=self.accounts["CASH"].pk,
            credit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
            amount="1000.00",
            context=self.context,
        )
        allocate(self.cash.pk, [(self.invoice.pk, "800.00")], context=self.context)

    def test_receipt_rollups(self):
        stats = get_statistics(company_id=1, as_of=TODAY)
        receipts = stats["receipts"]

        self.assertEqual(receipts["total_count"], 3)
        self.assertEqual(receipts["total_amount"], Decimal("1700.00"))
        self.assertEqual(receipts["posted_count"], 1)
        self.assertEqual(receipts["by_payment_type"][Receipt.TYPE_CHEQUE]["amount"], Decimal("500.00"))
        self.assertEqual(
            [(m["month"], m["posted_amount"]) for m in receipts["monthly"]],
            [(date(2024, 5, 1), Decimal("1000.00")), (date(2024, 6, 1), Decimal("0.00"))],
        )

    @override_settings(FINANCE={"DEPOSIT_OVERDUE_DAYS": 7})
    def test_pending_deposits(self):
        pending = get_statistics(as_of=TODAY)["receipts"]["pending_deposits"]

        # Waiting 25, 4 and 2 days.
        self.assertEqual(pending["count"], 3)
        self.assertEqual(pending["amount"], Decimal("1700.00"))
        self.assertEqual(pending["average_days_waiting"], Decimal("10.3"))
        self.assertEqual(pending["overdue_count"], 1)

    def test_allocation_coverage_only_counts_allocated_receipts(self):
        coverage = get_statistics(as_of=TODAY)["receipts"]["allocation_coverage"]

        self.assertEqual(coverage["allocated_receipts"], 1)
        self.assertEqual(coverage["unallocated_receipts"], 2)
        self.assertEqual(coverage["receipt_amount"], Decimal("1000.00"))
        self.assertEqual(coverage["allocated_amount"], Decimal("800.00"))
        self.assertEqual(coverage["coverage_ratio"], Decimal("0.8000"))

    def test_invoice_aging(self):
        invoices = get_statistics(as_of=TODAY)["invoices"]

        self.assertEqual(invoices["by_status"][Invoice.STATUS_PARTIALLY_PAID]["balance_amount"], Decimal("400.00"))
        first, second = invoices["aging"]
        self.assertEqual(first["customer_id"], CUSTOMER_ID)
        self.assertEqual(first["31_60"], Decimal("400.00"))
        self.assertEqual(second["current"], Decimal("300.00"))
        self.assertEqual(invoices["aging_totals"]["current"], Decimal("300.00"))

    def test_customer_and_date_filters(self):
        stats = get_statistics(customer_id=11, date_from=date(2024, 6, 1), date_to=date(2024, 6, 30), as_of=TODAY)

        self.assertEqual(stats["receipts"]["total_count"], 1)
        self.assertEqual(stats["receipts"]["allocation_coverage"]["coverage_ratio"], None)
        self.assertEqual(stats["filters"]["customer_id"], 11)

    def test_vouchers_and_lease_revenue(self):
        make_unit(make_contract())

        stats = get_statistics(date_from=date(2024, 6, 1), date_to=date(2024, 6, 30), as_of=TODAY)

        self.assertEqual(stats["vouchers"]["by_source_type"][Voucher.SOURCE_RECEIPT]["count"], 1)
        self.assertEqual(stats["vouchers"]["reversal_count"], 0)
        self.assertEqual(stats["lease_revenue"]["posted_count"], 0)
        self.assertEqual(stats["lease_revenue"]["period_unposted_count"], 1)
        self.assertEqual(stats["lease_revenue"]["period_unposted_amount"], Decimal("3000.00"))
