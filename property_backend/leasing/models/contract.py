# leasing/models/contract.py

"""
======================================================
PATH: leasing/models/contract.py
======================================================
CONTRACT + CONTRACT UNIT MODELS

Contract: lease agreement with one customer.
ContractUnit: one leased unit with its rent terms.

Guarantees:
- lease_end >= lease_start
- monthly rent / yearly rent / installment count stay consistent
  (clean() runs the rent synchronizer)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class Contract(models.Model):
    contract_no = models.CharField(max_length=30, unique=True)

    customer_id = models.PositiveIntegerField()
    customer_name = models.CharField(max_length=150, blank=True, default="")
    company_id = models.PositiveIntegerField()

    start_date = models.DateField()
    end_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date", "contract_no"]
        indexes = [
            models.Index(fields=["company_id", "customer_id"], name="lease_contract_customer_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_contract_date_range",
            ),
        ]

    def __str__(self):
        return self.contract_no

    def clean(self):
        self.contract_no = (self.contract_no or "").strip()
        if not self.contract_no:
            raise ValidationError("Contract number is required")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("Contract end_date cannot be before start_date")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class ContractUnit(models.Model):
    contract = models.ForeignKey(
        Contract,
        on_delete=models.PROTECT,
        related_name="units",
    )

    unit_no = models.CharField(max_length=30)
    property_name = models.CharField(max_length=150, blank=True, default="")

    monthly_rent = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    yearly_rent = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    installment_count = models.PositiveSmallIntegerField(null=True, blank=True)

    lease_start = models.DateField()
    lease_end = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["contract_id", "unit_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["contract", "unit_no"],
                name="uniq_contract_unit_no",
            ),
            models.CheckConstraint(
                condition=Q(lease_end__gte=F("lease_start")),
                name="chk_contract_unit_lease_range",
            ),
        ]

    def __str__(self):
        return f"{self.contract.contract_no} / {self.unit_no}"

    @property
    def lease_no(self) -> str:
        return self.contract.contract_no

    def clean(self):
        # Lazy import: models must never import services at module load.
        from leasing.services.rent_sync import synchronize_rent

        self.unit_no = (self.unit_no or "").strip()
        if not self.unit_no:
            raise ValidationError("Unit number is required")

        if self.lease_start and self.lease_end and self.lease_end < self.lease_start:
            raise ValidationError("Lease end cannot be before lease start")

        for name in ("monthly_rent", "yearly_rent"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError({name: "Rent cannot be negative"})

        terms = synchronize_rent(
            monthly_rent=self.monthly_rent,
            yearly_rent=self.yearly_rent,
            installment_count=self.installment_count,
        )
        self.monthly_rent = terms.monthly_rent
        self.yearly_rent = terms.yearly_rent
        self.installment_count = terms.installment_count

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
