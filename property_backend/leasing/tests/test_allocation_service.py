# leasing/tests/test_allocation_service.py

from decimal import Decimal
from unittest import mock

from django.db.models import F
from django.test import TestCase

from accounting.services.exceptions import (
    OVER_ALLOCATION,
    RECEIPT_OVERDRAWN,
    RECEIPT_NOT_OPEN,
    UNKNOWN_RECEIPT,
    ConcurrentModificationError,
    EngineValidationError,
    IntegrityViolationError,
)
from leasing.models.invoice import Invoice
from leasing.models.receipt import Receipt, ReceiptAllocation
from leasing.services import allocation_service
from leasing.services.allocation_service import allocate
from leasing.tests.helpers import make_context, make_invoice, make_receipt


class AllocationEngineTests(TestCase):
    """
    GUARANTEES:
    - paid + balance == total on every touched invoice
    - Sum of a receipt's allocations never exceeds its amount
    - A rejected distribution writes nothing (all-or-nothing)
    """

    def setUp(self):
        self.context = make_context(actor_id=7)
        self.receipt = make_receipt("RC-1", "1500.00")
        self.inv_a = make_invoice("INV-A", "800.00", status=Invoice.STATUS_POSTED)
        self.inv_b = make_invoice("INV-B", "500.00", status=Invoice.STATUS_POSTED)

    # --------------------------------------------------
    # Happy path
    # --------------------------------------------------

    def test_allocation_updates_invoices_and_leaves_remainder(self):
        result = allocate(
            self.receipt.pk,
            [
                {"invoice_id": self.inv_a.pk, "amount": "800.00"},
                {"invoice_id": self.inv_b.pk, "amount": "300.00"},
            ],
            context=self.context,
        )

        self.assertEqual(result.total_allocated, Decimal("1100.00"))
        self.assertEqual(result.unallocated_remainder, Decimal("400.00"))
        self.assertEqual(len(result.allocation_ids), 2)

        self.inv_a.refresh_from_db()
        self.inv_b.refresh_from_db()
        self.assertEqual(self.inv_a.status, Invoice.STATUS_PAID)
        self.assertEqual(self.inv_a.balance_amount, Decimal("0.00"))
        self.assertEqual(self.inv_b.status, Invoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(self.inv_b.paid_amount, Decimal("300.00"))
        self.assertEqual(self.inv_b.balance_amount, Decimal("200.00"))
        self.assertEqual(self.inv_b.version, 1)

        self.assertEqual(
            set(ReceiptAllocation.objects.values_list("created_by_id", flat=True)),
            {7},
        )

    def test_conservation_holds_across_receipts(self):
        second = make_receipt("RC-2", "500.00")

        allocate(self.receipt.pk, [(self.inv_a.pk, "600.00")], context=self.context)
        allocate(second.pk, [(self.inv_a.pk, "200.00"), (self.inv_b.pk, "300.00")], context=self.context)

        for invoice in Invoice.objects.all():
            self.assertEqual(invoice.paid_amount + invoice.balance_amount, invoice.total_amount)
        self.assertFalse(
            Invoice.objects.exclude(balance_amount=F("total_amount") - F("paid_amount")).exists()
        )
        self.assertEqual(second.unallocated_amount(), Decimal("0.00"))

    def test_later_allocation_only_uses_what_is_left(self):
        allocate(self.receipt.pk, [(self.inv_a.pk, "800.00")], context=self.context)

        with self.assertRaises(EngineValidationError) as ctx:
            allocate(self.receipt.pk, [(self.inv_b.pk, "500.00"), (self.inv_b.pk, "0.01")], context=self.context)

        self.assertIn(OVER_ALLOCATION, ctx.exception.codes)

        inv_c = make_invoice("INV-C", "1000.00")
        with self.assertRaises(EngineValidationError) as ctx:
            allocate(self.receipt.pk, [(inv_c.pk, "701.00")], context=self.context)
        self.assertEqual(ctx.exception.codes, [RECEIPT_OVERDRAWN])

    # --------------------------------------------------
    # All-or-nothing
    # --------------------------------------------------

    def test_rejected_distribution_writes_nothing(self):
        with self.assertRaises(EngineValidationError) as ctx:
            allocate(
                self.receipt.pk,
                [
                    {"invoice_id": self.inv_a.pk, "amount": "1000.00"},
                    {"invoice_id": self.inv_b.pk, "amount": "600.00"},
                ],
                context=self.context,
            )

        self.assertEqual(ctx.exception.codes, [OVER_ALLOCATION, OVER_ALLOCATION, RECEIPT_OVERDRAWN])
        self.assertFalse(ReceiptAllocation.objects.exists())
        self.inv_a.refresh_from_db()
        self.assertEqual(self.inv_a.paid_amount, Decimal("0.00"))

    def test_unknown_receipt(self):
        with self.assertRaises(EngineValidationError) as ctx:
            allocate(999999, [(self.inv_a.pk, "1.00")], context=self.context)

        self.assertEqual(ctx.exception.codes, [UNKNOWN_RECEIPT])

    def test_cancelled_receipt_books_nothing(self):
        cancelled = make_receipt("RC-X", "500.00", payment_status=Receipt.STATUS_CANCELLED)

        with self.assertRaises(EngineValidationError) as ctx:
            allocate(cancelled.pk, [(self.inv_a.pk, "500.00")], context=self.context)

        self.assertEqual(ctx.exception.codes, [RECEIPT_NOT_OPEN])
        self.assertFalse(ReceiptAllocation.objects.exists())
        self.inv_a.refresh_from_db()
        self.assertEqual(self.inv_a.paid_amount, Decimal("0.00"))

    def test_bounced_receipt_reports_status_with_line_errors(self):
        Receipt.objects.filter(pk=self.receipt.pk).update(payment_status=Receipt.STATUS_BOUNCED)

        with self.assertRaises(EngineValidationError) as ctx:
            allocate(self.receipt.pk, [(self.inv_b.pk, "600.00")], context=self.context)

        self.assertEqual(ctx.exception.codes, [RECEIPT_NOT_OPEN, OVER_ALLOCATION])

    # --------------------------------------------------
    # Concurrency + integrity
    # --------------------------------------------------

    def test_stale_invoice_version_rolls_back_everything(self):
        real_lock = allocation_service._lock_invoices

        def lock_then_race(invoice_ids, company_id):
            rows = real_lock(invoice_ids, company_id)
            # Another writer commits between our read and our write.
            Invoice.objects.filter(pk=self.inv_b.pk).update(version=F("version") + 1)
            return rows

        with mock.patch.object(allocation_service, "_lock_invoices", side_effect=lock_then_race):
            with self.assertRaises(ConcurrentModificationError):
                allocate(
                    self.receipt.pk,
                    [(self.inv_a.pk, "100.00"), (self.inv_b.pk, "100.00")],
                    context=self.context,
                )

        self.inv_a.refresh_from_db()
        self.assertEqual(self.inv_a.paid_amount, Decimal("0.00"))
        self.assertFalse(ReceiptAllocation.objects.exists())

    def test_broken_balance_invariant_aborts(self):
        Invoice.objects.filter(pk=self.inv_a.pk).update(balance_amount=Decimal("1.00"))

        with self.assertRaises(IntegrityViolationError):
            allocate(self.receipt.pk, [(self.inv_a.pk, "1.00")], context=self.context)

        self.assertFalse(ReceiptAllocation.objects.exists())
