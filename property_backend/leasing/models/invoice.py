# leasing/models/invoice.py

"""
======================================================
PATH: leasing/models/invoice.py
======================================================
INVOICE MODEL (ACCRUAL OBLIGATION)

Invariants:
- total = gross + tax - discount
- balance = total - paid
- 0 <= paid <= total (no overpayment policy)

Ownership:
- paid_amount / balance_amount / payment statuses: allocation engine only
- is_posted / voucher / Draft <-> Posted: posting + reversal engines only
Both engines write through versioned conditional updates (version column).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.voucher import Voucher


class Invoice(models.Model):
    STATUS_DRAFT = "Draft"
    STATUS_POSTED = "Posted"
    STATUS_PARTIALLY_PAID = "PartiallyPaid"
    STATUS_PAID = "Paid"
    STATUS_CANCELLED = "Cancelled"
    STATUS_VOID = "Void"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_PARTIALLY_PAID, "Partially paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_VOID, "Void"),
    ]

    CLOSED_STATUSES = (STATUS_CANCELLED, STATUS_VOID)

    invoice_no = models.CharField(max_length=30, unique=True)

    contract_unit = models.ForeignKey(
        "leasing.ContractUnit",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )
    customer_id = models.PositiveIntegerField()
    customer_name = models.CharField(max_length=150, blank=True, default="")
    company_id = models.PositiveIntegerField()

    period_start = models.DateField(null=True, blank=True)
    period_end = models.DateField(null=True, blank=True)
    invoice_date = models.DateField()
    due_date = models.DateField()

    gross_amount = models.DecimalField(max_digits=14, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    is_posted = models.BooleanField(default=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "id"]
        indexes = [
            models.Index(fields=["company_id", "customer_id"], name="lease_invoice_customer_idx"),
            models.Index(fields=["status"], name="lease_invoice_status_idx"),
            models.Index(fields=["due_date"], name="lease_invoice_due_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(paid_amount__gte=0),
                name="chk_invoice_paid_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(balance_amount__gte=0),
                name="chk_invoice_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(paid_amount__lte=F("total_amount")),
                name="chk_invoice_paid_within_total",
            ),
        ]

    def __str__(self):
        return self.invoice_no

    @property
    def is_open(self) -> bool:
        return self.status not in self.CLOSED_STATUSES

    def clean(self):
        self.invoice_no = (self.invoice_no or "").strip()
        if not self.invoice_no:
            raise ValidationError("Invoice number is required")

        gross = self.gross_amount or Decimal("0.00")
        tax = self.tax_amount or Decimal("0.00")
        discount = self.discount_amount or Decimal("0.00")
        paid = self.paid_amount or Decimal("0.00")

        if gross < 0 or tax < 0 or discount < 0:
            raise ValidationError("Invoice amounts cannot be negative")

        self.total_amount = gross + tax - discount
        if self.total_amount < 0:
            raise ValidationError("Discount cannot exceed gross + tax")

        if paid < 0 or paid > self.total_amount:
            raise ValidationError("Paid amount must be between 0 and the invoice total")

        self.balance_amount = self.total_amount - paid

        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValidationError("Invoice period_end cannot be before period_start")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
