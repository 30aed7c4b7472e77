"""
======================================================
PATH: leasing/migrations/0001_initial.py
======================================================
MIGRATION: INITIAL RECEIVABLES SCHEMA

Creates:
- Contract + ContractUnit (rent terms)
- Invoice (accrual obligation, versioned)
- Receipt + ReceiptAllocation (append-only join)
- LeaseRevenuePosting (posted-state of lease revenue entries)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Contract",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("contract_no", models.CharField(max_length=30, unique=True)),
                ("customer_id", models.PositiveIntegerField()),
                ("customer_name", models.CharField(blank=True, default="", max_length=150)),
                ("company_id", models.PositiveIntegerField()),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-start_date", "contract_no"],
                "indexes": [
                    models.Index(fields=["company_id", "customer_id"], name="lease_contract_customer_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="chk_contract_date_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ContractUnit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("unit_no", models.CharField(max_length=30)),
                ("property_name", models.CharField(blank=True, default="", max_length=150)),
                ("monthly_rent", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("yearly_rent", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("installment_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("lease_start", models.DateField()),
                ("lease_end", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "contract",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="units",
                        to="leasing.contract",
                    ),
                ),
            ],
            options={
                "ordering": ["contract_id", "unit_no"],
                "constraints": [
                    models.UniqueConstraint(fields=("contract", "unit_no"), name="uniq_contract_unit_no"),
                    models.CheckConstraint(
                        condition=models.Q(("lease_end__gte", models.F("lease_start"))),
                        name="chk_contract_unit_lease_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_no", models.CharField(max_length=30, unique=True)),
                ("customer_id", models.PositiveIntegerField()),
                ("customer_name", models.CharField(blank=True, default="", max_length=150)),
                ("company_id", models.PositiveIntegerField()),
                ("period_start", models.DateField(blank=True, null=True)),
                ("period_end", models.DateField(blank=True, null=True)),
                ("invoice_date", models.DateField()),
                ("due_date", models.DateField()),
                ("gross_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("balance_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Draft", "Draft"),
                            ("Posted", "Posted"),
                            ("PartiallyPaid", "Partially paid"),
                            ("Paid", "Paid"),
                            ("Cancelled", "Cancelled"),
                            ("Void", "Void"),
                        ],
                        default="Draft",
                        max_length=20,
                    ),
                ),
                ("is_posted", models.BooleanField(default=False)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "contract_unit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="leasing.contractunit",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "ordering": ["due_date", "id"],
                "indexes": [
                    models.Index(fields=["company_id", "customer_id"], name="lease_invoice_customer_idx"),
                    models.Index(fields=["status"], name="lease_invoice_status_idx"),
                    models.Index(fields=["due_date"], name="lease_invoice_due_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("paid_amount__gte", 0)),
                        name="chk_invoice_paid_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance_amount__gte", 0)),
                        name="chk_invoice_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("paid_amount__lte", models.F("total_amount"))),
                        name="chk_invoice_paid_within_total",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("receipt_no", models.CharField(max_length=30, unique=True)),
                ("customer_id", models.PositiveIntegerField()),
                ("customer_name", models.CharField(blank=True, default="", max_length=150)),
                ("company_id", models.PositiveIntegerField()),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "payment_type",
                    models.CharField(
                        choices=[
                            ("Cash", "Cash"),
                            ("Cheque", "Cheque"),
                            ("BankTransfer", "Bank transfer"),
                            ("CreditCard", "Credit card"),
                            ("Online", "Online"),
                        ],
                        default="Cash",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("Received", "Received"),
                            ("Deposited", "Deposited"),
                            ("Cleared", "Cleared"),
                            ("Bounced", "Bounced"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Received",
                        max_length=20,
                    ),
                ),
                ("bank_reference", models.CharField(blank=True, default="", max_length=60)),
                ("cheque_no", models.CharField(blank=True, default="", max_length=30)),
                ("received_date", models.DateField()),
                ("deposit_date", models.DateField(blank=True, null=True)),
                ("deposit_bank", models.CharField(blank=True, default="", max_length=100)),
                ("clearance_date", models.DateField(blank=True, null=True)),
                ("is_posted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipts",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "ordering": ["-received_date", "-id"],
                "indexes": [
                    models.Index(fields=["company_id", "customer_id"], name="lease_receipt_customer_idx"),
                    models.Index(fields=["payment_status"], name="lease_receipt_status_idx"),
                    models.Index(fields=["received_date"], name="lease_receipt_date_idx"),
                    models.Index(fields=["is_posted"], name="lease_receipt_posted_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="chk_receipt_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptAllocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("created_by_id", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="allocations",
                        to="leasing.invoice",
                    ),
                ),
                (
                    "receipt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="allocations",
                        to="leasing.receipt",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["receipt"], name="lease_alloc_receipt_idx"),
                    models.Index(fields=["invoice"], name="lease_alloc_invoice_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="chk_allocation_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LeaseRevenuePosting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("is_posted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "contract_unit",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="revenue_postings",
                        to="leasing.contractunit",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="lease_revenue_postings",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "ordering": ["-period_start", "contract_unit_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("contract_unit", "period_start", "period_end"),
                        name="uniq_lease_revenue_unit_period",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("period_end__gte", models.F("period_start"))),
                        name="chk_lease_revenue_period_range",
                    ),
                ],
            },
        ),
    ]
