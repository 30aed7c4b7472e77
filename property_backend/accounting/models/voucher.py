# accounting/models/voucher.py

"""
======================================================
PATH: accounting/models/voucher.py
======================================================
VOUCHER MODEL

One balanced financial event: the header shared by exactly two
ledger rows (one DEBIT leg, one CREDIT leg, equal amounts).

Guarantees:
- Immutable once created (no updates through save(), no deletes)
- The ONLY permitted mutation is reversed_by going from NULL to the
  reversing voucher, done by the reversal engine with a conditional update
- A voucher can be reversed at most once (unique reversal_of)
- Reversal chains keep a pointer to the root voucher for audit tracing

VoucherSequence:
- Per (prefix, year) counter used to allocate voucher numbers
- Incremented under row lock inside the posting transaction
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from accounting.models.fiscal_year import FiscalYear


class Voucher(models.Model):
    SOURCE_RECEIPT = "RECEIPT"
    SOURCE_LEASE_REVENUE = "LEASE_REVENUE"
    SOURCE_INVOICE = "INVOICE"

    SOURCE_TYPES = [
        (SOURCE_RECEIPT, "Receipt"),
        (SOURCE_LEASE_REVENUE, "Lease revenue"),
        (SOURCE_INVOICE, "Invoice"),
    ]

    voucher_no = models.CharField(max_length=30, unique=True)
    posting_date = models.DateField(help_text="Accounting effective date")
    narration = models.TextField()

    source_type = models.CharField(max_length=20, choices=SOURCE_TYPES)
    source_id = models.CharField(
        max_length=64,
        help_text="Receipt id, invoice id or lease revenue key (unit:start:end)",
    )
    reference = models.CharField(max_length=100, blank=True, null=True)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    # Reversal chain
    is_reversal = models.BooleanField(default=False)
    reversal_of = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
    )
    root_voucher = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="chain_vouchers",
        help_text="First voucher of the reversal chain (NULL on originals)",
    )
    reversal_depth = models.PositiveSmallIntegerField(default=0)
    reversed_by = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    reversal_reason = models.TextField(blank=True, default="")

    # Explicit execution context
    company_id = models.PositiveIntegerField()
    fiscal_year = models.ForeignKey(
        FiscalYear,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="vouchers",
    )
    created_by_id = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-posting_date", "-id"]
        verbose_name = "Voucher"
        verbose_name_plural = "Vouchers"
        permissions = [
            ("reverse_voucher", "Can reverse a posted voucher"),
        ]
        indexes = [
            models.Index(fields=["source_type", "source_id"], name="acct_voucher_source_idx"),
            models.Index(fields=["posting_date"], name="acct_voucher_date_idx"),
            models.Index(fields=["company_id"], name="acct_voucher_company_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_voucher_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    Q(is_reversal=False, reversal_of__isnull=True, reversal_depth=0)
                    | Q(is_reversal=True, reversal_of__isnull=False, reversal_depth__gt=0)
                ),
                name="chk_voucher_reversal_shape",
            ),
            models.UniqueConstraint(
                fields=["reversal_of"],
                condition=Q(reversal_of__isnull=False),
                name="uniq_voucher_single_reversal",
            ),
        ]

    def __str__(self):
        return f"{self.voucher_no} – {self.posting_date}"

    @property
    def root_id(self):
        return self.root_voucher_id or self.pk

    @property
    def is_reversed(self) -> bool:
        return self.reversed_by_id is not None

    def clean(self):
        self.voucher_no = (self.voucher_no or "").strip()
        if not self.voucher_no:
            raise ValidationError("Voucher number is required")

        self.narration = (self.narration or "").strip()
        if not self.narration:
            raise ValidationError("Voucher narration is required")

        self.source_id = str(self.source_id or "").strip()
        if not self.source_id:
            raise ValidationError("Voucher source_id is required")

        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Voucher records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Voucher records are immutable and cannot be deleted")


class VoucherSequence(models.Model):
    prefix = models.CharField(max_length=10)
    year = models.PositiveSmallIntegerField()
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Voucher Sequence"
        verbose_name_plural = "Voucher Sequences"
        constraints = [
            models.UniqueConstraint(
                fields=["prefix", "year"],
                name="uniq_voucher_sequence_prefix_year",
            ),
        ]

    def __str__(self):
        return f"{self.prefix}-{self.year}: {self.last_number}"
