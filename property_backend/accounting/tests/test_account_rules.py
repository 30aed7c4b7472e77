# accounting/tests/test_account_rules.py

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from accounting.models.account import Account
from accounting.services.account_rules import (
    AccountLookup,
    check_account_pair,
    check_amount_sign,
)
from accounting.services.exceptions import AMOUNT_OUT_OF_RANGE, INVALID_ACCOUNT_PAIR, NON_POSITIVE_AMOUNT
from accounting.services.money import MAX_AMOUNT, parse_money


class AccountPairStructureTests(SimpleTestCase):
    """
    Structural rules only (no lookup): present + different.
    """

    def test_distinct_ids_are_valid(self):
        self.assertEqual(check_account_pair(1, 2), [])

    def test_equal_ids_rejected(self):
        errors = check_account_pair("7", 7)
        self.assertEqual([e.code for e in errors], [INVALID_ACCOUNT_PAIR])

    def test_missing_sides_reported_separately(self):
        errors = check_account_pair(None, "")
        self.assertEqual(len(errors), 2)
        self.assertEqual({e.field for e in errors}, {"debit_account_id", "credit_account_id"})

    def test_amount_sign(self):
        self.assertEqual(check_amount_sign(Decimal("0.01"), code=NON_POSITIVE_AMOUNT), [])
        self.assertEqual(
            [e.code for e in check_amount_sign(Decimal("0.00"), code=NON_POSITIVE_AMOUNT)],
            [NON_POSITIVE_AMOUNT],
        )
        self.assertEqual(len(check_amount_sign(None, code=NON_POSITIVE_AMOUNT)), 1)

    def test_amount_beyond_column_range(self):
        self.assertEqual(check_amount_sign(MAX_AMOUNT, code=NON_POSITIVE_AMOUNT), [])
        for raw in ("1e30", "1000000000000.00"):
            self.assertEqual(
                [e.code for e in check_amount_sign(parse_money(raw), code=NON_POSITIVE_AMOUNT)],
                [AMOUNT_OUT_OF_RANGE],
            )

    def test_parse_money_never_raises(self):
        self.assertEqual(parse_money("12.345"), Decimal("12.35"))
        self.assertEqual(parse_money("1e30"), Decimal("1e30"))
        self.assertIsNone(parse_money("NaN"))
        self.assertIsNone(parse_money("twelve"))
        self.assertIsNone(parse_money(True))


class AccountPairLookupTests(TestCase):
    def setUp(self):
        self.cash = Account.objects.create(code="1000", name="Cash", account_type=Account.ASSET)
        self.income = Account.objects.create(code="4100", name="Rental Income", account_type=Account.REVENUE)

    def test_existing_active_accounts_are_valid(self):
        self.assertEqual(
            check_account_pair(self.cash.pk, self.income.pk, lookup=AccountLookup()),
            [],
        )

    def test_unknown_account_rejected(self):
        errors = check_account_pair(self.cash.pk, 999999, lookup=AccountLookup())
        self.assertEqual([e.field for e in errors], ["credit_account_id"])

    def test_inactive_and_header_accounts_rejected(self):
        self.cash.is_active = False
        self.cash.save()
        self.income.is_postable = False
        self.income.save()

        errors = check_account_pair(self.cash.pk, self.income.pk, lookup=AccountLookup())

        self.assertEqual(len(errors), 2)
        self.assertTrue(all(e.code == INVALID_ACCOUNT_PAIR for e in errors))
