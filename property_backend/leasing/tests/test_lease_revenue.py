# leasing/tests/test_lease_revenue.py

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.voucher import Voucher
from accounting.services.exceptions import ALREADY_POSTED, EngineValidationError
from accounting.services.posting import post
from accounting.services.reversal import reverse
from leasing.services.lease_revenue import (
    list_entries,
    make_source_id,
    parse_source_id,
)
from leasing.tests.helpers import (
    make_accounts,
    make_context,
    make_contract,
    make_fiscal_year,
    make_unit,
)

JUNE = (date(2024, 6, 1), date(2024, 6, 30))


class LeaseRevenueEntryTests(TestCase):
    def setUp(self):
        self.accounts = make_accounts()
        make_fiscal_year()
        self.context = make_context()
        self.contract = make_contract()
        self.unit = make_unit(self.contract)

    def _post_entry(self, entry):
        return post(
            source_type=Voucher.SOURCE_LEASE_REVENUE,
            source_id=entry.source_id,
            posting_date=date(2024, 6, 28),
            debit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
            credit_account_id=self.accounts["RENTAL_INCOME"].pk,
            amount=entry.posting_amount,
            context=self.context,
        )

    def test_full_month_amount(self):
        [entry] = list_entries(*JUNE)

        self.assertEqual(entry.total_lease_days, 30)
        self.assertEqual(entry.rent_per_day, Decimal("100.0000"))
        self.assertEqual(entry.posting_amount, Decimal("3000.00"))
        self.assertEqual(entry.current_balance, Decimal("3000.00"))
        self.assertEqual(entry.lease_no, "LC-001")
        self.assertFalse(entry.is_posted)

    def test_partial_overlap_is_prorated(self):
        make_unit(self.contract, "U-102", lease_start=date(2024, 6, 16))

        entries = {e.unit_no: e for e in list_entries(*JUNE)}

        self.assertEqual(entries["U-102"].total_lease_days, 15)
        self.assertEqual(entries["U-102"].posting_amount, Decimal("1500.00"))

    def test_units_outside_period_are_ignored(self):
        make_unit(self.contract, "U-103", lease_start=date(2024, 1, 1), lease_end=date(2024, 3, 31))

        self.assertEqual([e.unit_no for e in list_entries(*JUNE)], ["U-101"])

    def test_posted_entries_drop_out_of_unposted_list(self):
        [entry] = list_entries(*JUNE)
        voucher = self._post_entry(entry)

        self.assertEqual(list_entries(*JUNE), [])

        [posted] = list_entries(*JUNE, unposted_only=False)
        self.assertTrue(posted.is_posted)
        self.assertEqual(posted.voucher_no, voucher.voucher_no)
        self.assertEqual(posted.current_balance, Decimal("0.00"))

    def test_reversal_brings_entry_back(self):
        [entry] = list_entries(*JUNE)
        voucher = self._post_entry(entry)

        reverse(voucher_no=voucher.voucher_no, reason="Wrong period", context=self.context)

        [again] = list_entries(*JUNE)
        self.assertEqual(again.source_id, entry.source_id)
        self.assertFalse(again.is_posted)

    def test_company_filter(self):
        self.assertEqual(list_entries(*JUNE, company_id=2), [])

    def test_source_id_round_trip_and_rejects_garbage(self):
        source_id = make_source_id(self.unit.pk, *JUNE)

        self.assertEqual(parse_source_id(source_id), (self.unit.pk, *JUNE))
        with self.assertRaises(ValueError):
            parse_source_id("12:2024-06-30:2024-06-01")
        with self.assertRaises(ValueError):
            parse_source_id("not-a-key")

    def test_inverted_period_rejected(self):
        with self.assertRaises(ValueError):
            list_entries(date(2024, 6, 30), date(2024, 6, 1))


class LeaseRevenueOverlapTests(TestCase):
    """
    GUARANTEES:
    - A day of rent is posted at most once per unit, whatever period bounds
      the caller picks
    - Entries whose days are already covered drop out of the unposted list
    """

    def setUp(self):
        self.accounts = make_accounts()
        make_fiscal_year()
        self.context = make_context()
        self.unit = make_unit(make_contract())

    def _post(self, start, end):
        return post(
            source_type=Voucher.SOURCE_LEASE_REVENUE,
            source_id=make_source_id(self.unit.pk, start, end),
            posting_date=date(2024, 6, 28),
            debit_account_id=self.accounts["RENT_RECEIVABLE"].pk,
            credit_account_id=self.accounts["RENTAL_INCOME"].pk,
            amount="1000.00",
            context=self.context,
        )

    def test_overlapping_and_nested_periods_are_rejected(self):
        self._post(*JUNE)

        for start, end in [
            (date(2024, 6, 15), date(2024, 7, 14)),
            (date(2024, 6, 1), date(2024, 6, 29)),
            (date(2024, 5, 1), date(2024, 12, 31)),
        ]:
            with self.assertRaises(EngineValidationError) as ctx:
                self._post(start, end)
            self.assertEqual(ctx.exception.codes, [ALREADY_POSTED])

        self.assertEqual(Voucher.objects.filter(source_type=Voucher.SOURCE_LEASE_REVENUE).count(), 1)

    def test_adjacent_period_still_posts(self):
        self._post(*JUNE)
        self._post(date(2024, 7, 1), date(2024, 7, 31))

        self.assertEqual(Voucher.objects.filter(source_type=Voucher.SOURCE_LEASE_REVENUE).count(), 2)

    def test_reversed_period_frees_the_days(self):
        voucher = self._post(*JUNE)
        reverse(voucher_no=voucher.voucher_no, reason="Re-cut periods", context=self.context)

        self._post(date(2024, 6, 15), date(2024, 7, 14))

    def test_re_posting_by_reversal_respects_newer_overlap(self):
        voucher = self._post(*JUNE)
        reversal = reverse(voucher_no=voucher.voucher_no, reason="Re-cut periods", context=self.context)
        self._post(date(2024, 6, 15), date(2024, 7, 14))

        with self.assertRaises(EngineValidationError) as ctx:
            reverse(voucher_no=reversal.voucher_no, reason="Undo", context=self.context)

        self.assertEqual(ctx.exception.codes, [ALREADY_POSTED])

    def test_covered_unit_drops_out_of_unposted_list(self):
        self._post(*JUNE)

        self.assertEqual(list_entries(date(2024, 6, 1), date(2024, 8, 31)), [])
        self.assertEqual(len(list_entries(date(2024, 7, 1), date(2024, 7, 31))), 1)
