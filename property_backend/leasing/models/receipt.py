# leasing/models/receipt.py

"""
======================================================
PATH: leasing/models/receipt.py
======================================================
RECEIPT + RECEIPT ALLOCATION MODELS

Receipt (cash inflow):
- Once is_posted is true, core financial fields are immutable
  (amount, received_date, customer, payment type, company).
- Status fields (payment_status, deposit/clearance info) stay mutable.

ReceiptAllocation (Receipt <-> Invoice join):
- Append-only (no updates, no deletes)
- amount > 0
- Written only by the allocation engine
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, Sum

from accounting.models.voucher import Voucher


class Receipt(models.Model):
    # Payment types
    TYPE_CASH = "Cash"
    TYPE_CHEQUE = "Cheque"
    TYPE_BANK_TRANSFER = "BankTransfer"
    TYPE_CREDIT_CARD = "CreditCard"
    TYPE_ONLINE = "Online"

    PAYMENT_TYPE_CHOICES = [
        (TYPE_CASH, "Cash"),
        (TYPE_CHEQUE, "Cheque"),
        (TYPE_BANK_TRANSFER, "Bank transfer"),
        (TYPE_CREDIT_CARD, "Credit card"),
        (TYPE_ONLINE, "Online"),
    ]

    # Payment statuses
    STATUS_RECEIVED = "Received"
    STATUS_DEPOSITED = "Deposited"
    STATUS_CLEARED = "Cleared"
    STATUS_BOUNCED = "Bounced"
    STATUS_CANCELLED = "Cancelled"

    PAYMENT_STATUS_CHOICES = [
        (STATUS_RECEIVED, "Received"),
        (STATUS_DEPOSITED, "Deposited"),
        (STATUS_CLEARED, "Cleared"),
        (STATUS_BOUNCED, "Bounced"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # No money behind these: nothing may be allocated or deposited from them.
    CLOSED_STATUSES = (STATUS_BOUNCED, STATUS_CANCELLED)

    IMMUTABLE_WHEN_POSTED = (
        "amount",
        "received_date",
        "customer_id",
        "payment_type",
        "company_id",
    )

    receipt_no = models.CharField(max_length=30, unique=True)

    customer_id = models.PositiveIntegerField()
    customer_name = models.CharField(max_length=150, blank=True, default="")
    company_id = models.PositiveIntegerField()

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default=TYPE_CASH)
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=STATUS_RECEIVED,
    )

    bank_reference = models.CharField(max_length=60, blank=True, default="")
    cheque_no = models.CharField(max_length=30, blank=True, default="")

    received_date = models.DateField()
    deposit_date = models.DateField(null=True, blank=True)
    deposit_bank = models.CharField(max_length=100, blank=True, default="")
    clearance_date = models.DateField(null=True, blank=True)

    is_posted = models.BooleanField(default=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receipts",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-received_date", "-id"]
        indexes = [
            models.Index(fields=["company_id", "customer_id"], name="lease_receipt_customer_idx"),
            models.Index(fields=["payment_status"], name="lease_receipt_status_idx"),
            models.Index(fields=["received_date"], name="lease_receipt_date_idx"),
            models.Index(fields=["is_posted"], name="lease_receipt_posted_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_receipt_amount_positive",
            ),
        ]

    def __str__(self):
        return self.receipt_no

    @property
    def is_open(self) -> bool:
        return self.payment_status not in self.CLOSED_STATUSES

    def allocated_total(self) -> Decimal:
        total = self.allocations.aggregate(total=Sum("amount"))["total"]
        return total or Decimal("0.00")

    def unallocated_amount(self) -> Decimal:
        return self.amount - self.allocated_total()

    def clean(self):
        self.receipt_no = (self.receipt_no or "").strip()
        if not self.receipt_no:
            raise ValidationError("Receipt number is required")

        if self.payment_type == self.TYPE_CHEQUE and not (self.cheque_no or "").strip():
            raise ValidationError({"cheque_no": "Cheque number is required for cheque receipts"})

        if self.deposit_date and self.received_date and self.deposit_date < self.received_date:
            raise ValidationError({"deposit_date": "Deposit date cannot be before the receipt date"})

        if self.clearance_date and self.received_date and self.clearance_date < self.received_date:
            raise ValidationError({"clearance_date": "Clearance date cannot be before the receipt date"})

    def _assert_core_fields_unchanged(self):
        stored = (
            type(self)
            .objects.filter(pk=self.pk)
            .values("is_posted", *self.IMMUTABLE_WHEN_POSTED)
            .first()
        )
        if not stored or not stored["is_posted"]:
            return

        changed = [f for f in self.IMMUTABLE_WHEN_POSTED if stored[f] != getattr(self, f)]
        if changed:
            raise ValidationError(
                f"Receipt {self.receipt_no} is posted; fields {', '.join(changed)} are immutable"
            )

    def save(self, *args, **kwargs):
        if self.pk:
            self._assert_core_fields_unchanged()

        self.full_clean()
        return super().save(*args, **kwargs)


class ReceiptAllocation(models.Model):
    receipt = models.ForeignKey(
        Receipt,
        on_delete=models.PROTECT,
        related_name="allocations",
    )
    invoice = models.ForeignKey(
        "leasing.Invoice",
        on_delete=models.PROTECT,
        related_name="allocations",
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    created_by_id = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["receipt"], name="lease_alloc_receipt_idx"),
            models.Index(fields=["invoice"], name="lease_alloc_invoice_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_allocation_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.receipt_id} → {self.invoice_id}: {self.amount}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("ReceiptAllocation records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ReceiptAllocation records are immutable and cannot be deleted")
