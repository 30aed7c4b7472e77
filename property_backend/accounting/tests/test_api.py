# accounting/tests/test_api.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.voucher import Voucher
from accounting.services.exceptions import (
    ALREADY_POSTED,
    EMPTY_REASON,
    INVALID_ACCOUNT_PAIR,
    NON_POSITIVE_AMOUNT,
)
from leasing.models.receipt import Receipt
from leasing.tests.helpers import make_accounts, make_receipt

User = get_user_model()

POSTINGS_URL = "/api/accounting/postings/"
VALIDATE_URL = "/api/accounting/postings/validate/"
VOUCHERS_URL = "/api/accounting/vouchers/"


def _grant(user, *codenames):
    for codename in codenames:
        app_label, name = codename.split(".")
        user.user_permissions.add(
            Permission.objects.get(content_type__app_label=app_label, codename=name)
        )


class PostingApiTests(TestCase):
    """
    GUARANTEES:
    - Posting / reversing require explicit Django permissions (403 otherwise)
    - Engine validation errors surface as 400 {"errors": [...]} with codes
    - Anonymous users are denied everywhere
    """

    def setUp(self):
        self.client = APIClient()
        self.accounts = make_accounts()
        self.receipt = make_receipt("RC-1", "1500.00")

        self.clerk = User.objects.create_user(username="clerk", password="pass")
        self.accountant = User.objects.create_user(username="accountant", password="pass")
        _grant(
            self.accountant,
            "accounting.add_voucher",
            "accounting.reverse_voucher",
            "accounting.view_voucher",
        )

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _payload(self, **overrides):
        payload = {
            "source_type": Voucher.SOURCE_RECEIPT,
            "source_id": str(self.receipt.pk),
            "posting_date": "2024-06-14",
            "debit_account_id": self.accounts["CASH"].pk,
            "credit_account_id": self.accounts["RENT_RECEIVABLE"].pk,
            "amount": "1500.00",
        }
        payload.update(overrides)
        return payload

    def _post_as_accountant(self, **overrides):
        self.client.force_authenticate(self.accountant)
        return self.client.post(POSTINGS_URL, self._payload(**overrides), format="json")

    # --------------------------------------------------
    # Permissions
    # --------------------------------------------------

    def test_anonymous_denied(self):
        response = self.client.post(POSTINGS_URL, self._payload(), format="json")
        self.assertEqual(response.status_code, 401)

    def test_user_without_permission_gets_403(self):
        self.client.force_authenticate(self.clerk)

        self.assertEqual(self.client.post(POSTINGS_URL, self._payload(), format="json").status_code, 403)
        self.assertEqual(self.client.get(VOUCHERS_URL).status_code, 403)
        self.assertFalse(Voucher.objects.exists())

    # --------------------------------------------------
    # Posting
    # --------------------------------------------------

    def test_post_returns_created_voucher(self):
        response = self._post_as_accountant()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["voucher_no"], "RCV-2024-000001")
        self.assertEqual(response.data["amount"], "1500.00")
        self.assertEqual(len(response.data["ledger_entries"]), 2)

        self.receipt.refresh_from_db()
        self.assertTrue(self.receipt.is_posted)

    def test_post_reports_every_error(self):
        response = self._post_as_accountant(
            credit_account_id=self.accounts["CASH"].pk,
            amount="-1",
        )

        self.assertEqual(response.status_code, 400)
        codes = [error["code"] for error in response.data["errors"]]
        self.assertIn(INVALID_ACCOUNT_PAIR, codes)
        self.assertIn(NON_POSITIVE_AMOUNT, codes)

    def test_repost_is_rejected(self):
        self._post_as_accountant()
        response = self._post_as_accountant()

        self.assertEqual(response.status_code, 400)
        self.assertEqual([e["code"] for e in response.data["errors"]], [ALREADY_POSTED])
        self.assertEqual(Voucher.objects.count(), 1)

    def test_validate_endpoint_is_a_dry_run(self):
        self.client.force_authenticate(self.accountant)
        response = self.client.post(VALIDATE_URL, self._payload(posting_date="2024-06-15"), format="json")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["is_valid"])
        self.assertTrue(response.data["warnings"])
        self.assertFalse(Voucher.objects.exists())

    # --------------------------------------------------
    # Reversal
    # --------------------------------------------------

    def test_reverse_endpoint(self):
        voucher_no = self._post_as_accountant().data["voucher_no"]

        response = self.client.post(
            f"{VOUCHERS_URL}{voucher_no}/reverse/",
            {"reason": "Duplicate receipt"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data["is_reversal"])
        self.assertEqual(response.data["reversal_of_no"], voucher_no)
        self.assertFalse(Receipt.objects.get(pk=self.receipt.pk).is_posted)

    def test_reverse_requires_reason(self):
        voucher_no = self._post_as_accountant().data["voucher_no"]

        response = self.client.post(f"{VOUCHERS_URL}{voucher_no}/reverse/", {}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual([e["code"] for e in response.data["errors"]], [EMPTY_REASON])

    def test_reverse_requires_permission(self):
        voucher_no = self._post_as_accountant().data["voucher_no"]
        self.client.force_authenticate(self.clerk)

        response = self.client.post(
            f"{VOUCHERS_URL}{voucher_no}/reverse/",
            {"reason": "Not mine to reverse"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    # --------------------------------------------------
    # Read side
    # --------------------------------------------------

    def test_voucher_list_filters_by_source(self):
        self._post_as_accountant()

        response = self.client.get(VOUCHERS_URL, {"source_type": Voucher.SOURCE_RECEIPT})

        self.assertEqual(response.status_code, 200)
        results = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["source_id"], str(self.receipt.pk))
