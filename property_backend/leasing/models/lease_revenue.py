# leasing/models/lease_revenue.py

"""
======================================================
PATH: leasing/models/lease_revenue.py
======================================================
LEASE REVENUE POSTING MODEL

Lease revenue entries are computed on demand from contract units.
This row is the persisted posted-state of one (unit, period) entry:
created the first time the entry is posted, flipped back to unposted
by a reversal, re-posted afterwards.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from accounting.models.voucher import Voucher


class LeaseRevenuePosting(models.Model):
    contract_unit = models.ForeignKey(
        "leasing.ContractUnit",
        on_delete=models.PROTECT,
        related_name="revenue_postings",
    )

    period_start = models.DateField()
    period_end = models.DateField()

    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    is_posted = models.BooleanField(default=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="lease_revenue_postings",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-period_start", "contract_unit_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["contract_unit", "period_start", "period_end"],
                name="uniq_lease_revenue_unit_period",
            ),
            models.CheckConstraint(
                condition=Q(period_end__gte=F("period_start")),
                name="chk_lease_revenue_period_range",
            ),
        ]

    def __str__(self):
        return f"{self.contract_unit_id}:{self.period_start}:{self.period_end}"

    @property
    def company_id(self):
        return self.contract_unit.contract.company_id
