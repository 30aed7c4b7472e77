# leasing/tests/test_receipt_status.py

from datetime import date

from django.test import TestCase

from accounting.services.exceptions import (
    INVALID_DEPOSIT_DATE,
    INVALID_STATUS_TRANSITION,
    UNKNOWN_RECEIPT,
    EngineValidationError,
)
from leasing.models.receipt import Receipt
from leasing.services.receipt_status import (
    can_transition,
    change_receipt_status,
    set_deposit_info,
)
from leasing.tests.helpers import TODAY, make_context, make_receipt


class ReceiptTransitionRuleTests(TestCase):
    def test_allowed_paths(self):
        self.assertTrue(can_transition(from_status=Receipt.STATUS_RECEIVED, to_status=Receipt.STATUS_DEPOSITED))
        self.assertTrue(can_transition(from_status=Receipt.STATUS_DEPOSITED, to_status=Receipt.STATUS_CLEARED))
        self.assertTrue(can_transition(from_status=Receipt.STATUS_CLEARED, to_status=Receipt.STATUS_BOUNCED))

    def test_forbidden_paths(self):
        self.assertFalse(can_transition(from_status=Receipt.STATUS_CLEARED, to_status=Receipt.STATUS_RECEIVED))
        self.assertFalse(can_transition(from_status=Receipt.STATUS_CANCELLED, to_status=Receipt.STATUS_RECEIVED))
        self.assertFalse(can_transition(from_status=Receipt.STATUS_DEPOSITED, to_status=Receipt.STATUS_DEPOSITED))


class ReceiptStatusMutatorTests(TestCase):
    def setUp(self):
        self.context = make_context()
        self.receipt = make_receipt("RC-1", "250.00", payment_type=Receipt.TYPE_CHEQUE)

    # --------------------------------------------------
    # Status
    # --------------------------------------------------

    def test_clearing_defaults_clearance_date_to_today(self):
        change_receipt_status(self.receipt.pk, Receipt.STATUS_CLEARED, context=self.context)

        self.receipt.refresh_from_db()
        self.assertEqual(self.receipt.payment_status, Receipt.STATUS_CLEARED)
        self.assertEqual(self.receipt.clearance_date, TODAY)

    def test_clearance_before_receipt_rejected(self):
        with self.assertRaises(EngineValidationError) as ctx:
            change_receipt_status(
                self.receipt.pk,
                Receipt.STATUS_CLEARED,
                clearance_date=date(2024, 6, 1),
                context=self.context,
            )
        self.assertEqual(ctx.exception.codes, [INVALID_DEPOSIT_DATE])

    def test_invalid_transition_rejected(self):
        change_receipt_status(self.receipt.pk, Receipt.STATUS_BOUNCED, context=self.context)

        with self.assertRaises(EngineValidationError) as ctx:
            change_receipt_status(self.receipt.pk, Receipt.STATUS_DEPOSITED, context=self.context)
        self.assertEqual(ctx.exception.codes, [INVALID_STATUS_TRANSITION])

    def test_posted_receipt_cannot_be_cancelled(self):
        Receipt.objects.filter(pk=self.receipt.pk).update(is_posted=True)

        with self.assertRaises(EngineValidationError) as ctx:
            change_receipt_status(self.receipt.pk, Receipt.STATUS_CANCELLED, context=self.context)
        self.assertEqual(ctx.exception.codes, [INVALID_STATUS_TRANSITION])

    def test_posted_receipt_status_stays_mutable(self):
        Receipt.objects.filter(pk=self.receipt.pk).update(is_posted=True)

        receipt = change_receipt_status(self.receipt.pk, Receipt.STATUS_DEPOSITED, context=self.context)
        self.assertEqual(receipt.payment_status, Receipt.STATUS_DEPOSITED)

    def test_unknown_receipt(self):
        with self.assertRaises(EngineValidationError) as ctx:
            change_receipt_status("nope", Receipt.STATUS_CLEARED, context=self.context)
        self.assertEqual(ctx.exception.codes, [UNKNOWN_RECEIPT])

    # --------------------------------------------------
    # Deposit info
    # --------------------------------------------------

    def test_deposit_info_moves_received_to_deposited(self):
        set_deposit_info(
            self.receipt.pk,
            deposit_date=date(2024, 6, 11),
            deposit_bank="  First City Bank ",
            context=self.context,
        )

        self.receipt.refresh_from_db()
        self.assertEqual(self.receipt.payment_status, Receipt.STATUS_DEPOSITED)
        self.assertEqual(self.receipt.deposit_date, date(2024, 6, 11))
        self.assertEqual(self.receipt.deposit_bank, "First City Bank")

    def test_deposit_before_receipt_rejected(self):
        with self.assertRaises(EngineValidationError) as ctx:
            set_deposit_info(self.receipt.pk, deposit_date=date(2024, 6, 9), context=self.context)
        self.assertEqual(ctx.exception.codes, [INVALID_DEPOSIT_DATE])

        self.receipt.refresh_from_db()
        self.assertIsNone(self.receipt.deposit_date)
