# accounting/tests/test_posting.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher, VoucherSequence
from accounting.services.exceptions import (
    ALREADY_POSTED,
    AMOUNT_OUT_OF_RANGE,
    FUTURE_POSTING_DATE,
    INVALID_ACCOUNT_PAIR,
    INVALID_STATUS_TRANSITION,
    NON_POSITIVE_AMOUNT,
    PERIOD_CLOSED,
    STALE_POSTING_DATE,
    UNKNOWN_SOURCE,
    WEEKEND_POSTING_DATE,
    EngineValidationError,
)
from accounting.services.posting import post, validate_posting
from accounting.services.posting_sources import ReceiptSource
from leasing.models.invoice import Invoice
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.models.receipt import Receipt
from leasing.services.lease_revenue import make_source_id
from leasing.tests.helpers import (
    TODAY,
    make_accounts,
    make_context,
    make_contract,
    make_fiscal_year,
    make_invoice,
    make_receipt,
    make_unit,
)


class PostingEngineTests(TestCase):
    """
    GUARANTEES:
    - At most one voucher per source (second post -> AlreadyPosted, no rows)
    - Every voucher has exactly two equal, opposite legs
    - Validation reports every problem, not just the first
    """

    def setUp(self):
        self.accounts = make_accounts()
        self.fiscal_year = make_fiscal_year()
        self.context = make_context(fiscal_year_id=self.fiscal_year.pk)
        self.receipt = make_receipt("RC-1", "1500.00")

    def _post_receipt(self, receipt=None, **overrides):
        receipt = receipt or self.receipt
        kwargs = {
            "source_type": Voucher.SOURCE_RECEIPT,
            "source_id": receipt.pk,
            "posting_date": TODAY,
            "debit_account_id": self.accounts["CASH"].pk,
            "credit_account_id": self.accounts["RENT_RECEIVABLE"].pk,
            "amount": receipt.amount,
            "context": self.context,
        }
        kwargs.update(overrides)
        return post(**kwargs)

    # --------------------------------------------------
    # Happy path
    # --------------------------------------------------

    def test_post_receipt_creates_balanced_voucher(self):
        voucher = self._post_receipt()

        self.assertEqual(voucher.voucher_no, "RCV-2024-000001")
        self.assertEqual(voucher.amount, Decimal("1500.00"))
        self.assertEqual(voucher.company_id, 1)
        self.assertEqual(voucher.fiscal_year_id, self.fiscal_year.pk)

        legs = LedgerEntry.objects.filter(voucher=voucher)
        self.assertEqual(legs.count(), 2)
        debit = legs.get(entry_type=LedgerEntry.DEBIT)
        credit = legs.get(entry_type=LedgerEntry.CREDIT)
        self.assertEqual(debit.amount, credit.amount)
        self.assertEqual(debit.account_id, self.accounts["CASH"].pk)
        self.assertEqual(credit.account_id, self.accounts["RENT_RECEIVABLE"].pk)

        self.receipt.refresh_from_db()
        self.assertTrue(self.receipt.is_posted)
        self.assertEqual(self.receipt.voucher_id, voucher.pk)

    def test_voucher_numbers_are_sequential_per_prefix(self):
        second = make_receipt("RC-2", "200.00")

        first_no = self._post_receipt().voucher_no
        second_no = self._post_receipt(second, amount="200.00").voucher_no

        self.assertEqual(first_no, "RCV-2024-000001")
        self.assertEqual(second_no, "RCV-2024-000002")

    def test_default_narration_names_the_source(self):
        voucher = self._post_receipt()
        self.assertEqual(voucher.narration, f"RECEIPT {self.receipt.pk}")

    # --------------------------------------------------
    # Idempotency
    # --------------------------------------------------

    def test_second_post_is_rejected_and_writes_nothing(self):
        self._post_receipt()
        vouchers_before = Voucher.objects.count()
        legs_before = LedgerEntry.objects.count()

        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt()

        self.assertEqual(ctx.exception.codes, [ALREADY_POSTED])
        self.assertEqual(Voucher.objects.count(), vouchers_before)
        self.assertEqual(LedgerEntry.objects.count(), legs_before)

    # --------------------------------------------------
    # Validation
    # --------------------------------------------------

    def test_collects_every_error(self):
        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(
                debit_account_id=self.accounts["CASH"].pk,
                credit_account_id=self.accounts["CASH"].pk,
                amount="0",
            )

        self.assertIn(INVALID_ACCOUNT_PAIR, ctx.exception.codes)
        self.assertIn(NON_POSITIVE_AMOUNT, ctx.exception.codes)
        self.assertFalse(Voucher.objects.exists())

    def test_unknown_source(self):
        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(source_id=999999)
        self.assertEqual(ctx.exception.codes, [UNKNOWN_SOURCE])

        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(source_type="PAYROLL")
        self.assertEqual(ctx.exception.codes, [UNKNOWN_SOURCE])

    def test_source_of_another_company_is_unknown(self):
        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(context=make_context(company_id=2))
        self.assertIn(UNKNOWN_SOURCE, ctx.exception.codes)

    def test_cancelled_receipt_cannot_be_posted(self):
        Receipt.objects.filter(pk=self.receipt.pk).update(payment_status=Receipt.STATUS_CANCELLED)

        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt()
        self.assertEqual(ctx.exception.codes, [INVALID_STATUS_TRANSITION])

    def test_closed_period_blocks_posting(self):
        closed = make_fiscal_year(year=2023, is_closed=True)

        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(posting_date=date(2023, 12, 29), context=make_context())
        self.assertEqual(ctx.exception.codes, [PERIOD_CLOSED])

        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(context=make_context(fiscal_year_id=closed.pk))
        self.assertEqual(ctx.exception.codes, [PERIOD_CLOSED])

        self.assertFalse(Voucher.objects.exists())

    # --------------------------------------------------
    # Other source types
    # --------------------------------------------------

    def test_post_invoice_moves_draft_to_posted(self):
        invoice = make_invoice("INV-1", "1000.00")

        voucher = post(
            source_type=Voucher.SOURCE_INVOICE,
            source_id=invoice.pk,
            posting_date=TODAY,
            debit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
            credit_account_id=self.accounts["RENTAL_INCOME"].pk,
            amount=invoice.total_amount,
            context=self.context,
        )

        invoice.refresh_from_db()
        self.assertTrue(invoice.is_posted)
        self.assertEqual(invoice.status, Invoice.STATUS_POSTED)
        self.assertEqual(invoice.version, 1)
        self.assertTrue(voucher.voucher_no.startswith("INV-2024-"))

    def test_post_lease_revenue_creates_posting_row(self):
        unit = make_unit(make_contract())
        source_id = make_source_id(unit.pk, date(2024, 6, 1), date(2024, 6, 30))

        voucher = post(
            source_type=Voucher.SOURCE_LEASE_REVENUE,
            source_id=source_id,
            posting_date=TODAY,
            debit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
            credit_account_id=self.accounts["RENTAL_INCOME"].pk,
            amount="3000.00",
            context=self.context,
        )

        row = LeaseRevenuePosting.objects.get(contract_unit=unit)
        self.assertTrue(row.is_posted)
        self.assertEqual(row.voucher_id, voucher.pk)
        self.assertEqual(row.amount, Decimal("3000.00"))
        self.assertEqual(voucher.source_id, source_id)

    def test_lease_revenue_outside_lease_is_unknown(self):
        unit = make_unit(make_contract(), lease_end=date(2024, 3, 31))

        with self.assertRaises(EngineValidationError) as ctx:
            post(
                source_type=Voucher.SOURCE_LEASE_REVENUE,
                source_id=make_source_id(unit.pk, date(2024, 6, 1), date(2024, 6, 30)),
                posting_date=TODAY,
                debit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
                credit_account_id=self.accounts["RENTAL_INCOME"].pk,
                amount="100.00",
                context=self.context,
            )
        self.assertEqual(ctx.exception.codes, [UNKNOWN_SOURCE])
        self.assertFalse(LeaseRevenuePosting.objects.exists())

    def test_amount_beyond_column_range_is_a_validation_error(self):
        with self.assertRaises(EngineValidationError) as ctx:
            self._post_receipt(amount="1e30")

        self.assertEqual(ctx.exception.codes, [AMOUNT_OUT_OF_RANGE])
        self.assertFalse(Voucher.objects.exists())

    # --------------------------------------------------
    # Lost check-and-set
    # --------------------------------------------------

    def test_losing_the_source_flag_race_rolls_back_everything(self):
        with mock.patch.object(ReceiptSource, "mark_posted", return_value=False):
            with self.assertRaises(EngineValidationError) as ctx:
                self._post_receipt()

        self.assertEqual(ctx.exception.codes, [ALREADY_POSTED])
        self.assertFalse(Voucher.objects.exists())
        self.assertFalse(LedgerEntry.objects.exists())
        self.assertFalse(VoucherSequence.objects.exists())

        # No number was consumed: the next post still gets the first one.
        self.assertEqual(self._post_receipt().voucher_no, "RCV-2024-000001")

    # --------------------------------------------------
    # Immutability
    # --------------------------------------------------

    def test_voucher_and_legs_are_immutable(self):
        voucher = self._post_receipt()
        leg = voucher.ledger_entries.first()

        voucher.narration = "edited"
        with self.assertRaises(ValidationError):
            voucher.save()
        with self.assertRaises(ValidationError):
            voucher.delete()

        leg.amount = Decimal("1.00")
        with self.assertRaises(ValidationError):
            leg.save()
        with self.assertRaises(ValidationError):
            leg.delete()


class ValidatePostingTests(TestCase):
    def setUp(self):
        self.accounts = make_accounts()
        make_fiscal_year()
        self.receipt = make_receipt("RC-1", "500.00")

    def _validate(self, posting_date, **overrides):
        kwargs = {
            "source_type": Voucher.SOURCE_RECEIPT,
            "source_id": self.receipt.pk,
            "posting_date": posting_date,
            "debit_account_id": self.accounts["CASH"].pk,
            "credit_account_id": self.accounts["RENT_RECEIVABLE"].pk,
            "amount": "500.00",
            "context": make_context(),
        }
        kwargs.update(overrides)
        return validate_posting(**kwargs)

    def test_clean_posting_has_no_warnings(self):
        result = self._validate(TODAY)
        self.assertEqual(result, {"is_valid": True, "errors": [], "warnings": []})

    def test_date_warnings_never_block(self):
        weekend = self._validate(date(2024, 6, 8))
        future = self._validate(date(2024, 6, 20))
        stale = self._validate(date(2024, 3, 1))

        self.assertTrue(weekend["is_valid"])
        self.assertEqual([w["code"] for w in weekend["warnings"]], [WEEKEND_POSTING_DATE])
        self.assertEqual([w["code"] for w in future["warnings"]], [FUTURE_POSTING_DATE])
        self.assertEqual([w["code"] for w in stale["warnings"]], [STALE_POSTING_DATE])

    def test_validate_never_writes(self):
        result = self._validate(TODAY, amount="-5")

        self.assertFalse(result["is_valid"])
        self.assertEqual([e["code"] for e in result["errors"]], [NON_POSITIVE_AMOUNT])
        self.assertFalse(Voucher.objects.exists())
        self.receipt.refresh_from_db()
        self.assertFalse(self.receipt.is_posted)
