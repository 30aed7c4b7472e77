# accounting/models/fiscal_year.py

"""
======================================================
PATH: accounting/models/fiscal_year.py
======================================================
FISCAL YEAR MODEL

Accounting period per company.

Guarantees:
- start_date <= end_date
- Closed fiscal years reject new vouchers (enforced by period_lock)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class FiscalYear(models.Model):
    company_id = models.PositiveIntegerField()
    code = models.CharField(max_length=20)

    start_date = models.DateField()
    end_date = models.DateField()

    is_closed = models.BooleanField(default=False)
    closed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["company_id", "-start_date"]
        verbose_name = "Fiscal Year"
        verbose_name_plural = "Fiscal Years"
        indexes = [
            models.Index(
                fields=["company_id", "start_date", "end_date"],
                name="acct_fy_company_range_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company_id", "code"],
                name="uniq_fiscal_year_company_code",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_fiscal_year_range",
            ),
        ]

    def __str__(self):
        return f"{self.code} ({self.start_date} → {self.end_date})"

    def clean(self):
        self.code = (self.code or "").strip()
        if not self.code:
            raise ValidationError("Fiscal year code is required")

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("Fiscal year end_date cannot be before start_date")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def contains(self, day) -> bool:
        return self.start_date <= day <= self.end_date
