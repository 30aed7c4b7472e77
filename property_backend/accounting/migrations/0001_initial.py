"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: INITIAL LEDGER SCHEMA

Creates:
- Account (account master)
- FiscalYear (period locks)
- Voucher + VoucherSequence
- LedgerEntry (immutable voucher legs)
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=10, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "is_postable",
                    models.BooleanField(default=True, help_text="Header/group accounts are not postable"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["account_type"], name="acct_account_type_idx"),
                    models.Index(fields=["is_active"], name="acct_account_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("code", ""), _negated=True),
                        name="chk_account_code_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="chk_account_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FiscalYear",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("company_id", models.PositiveIntegerField()),
                ("code", models.CharField(max_length=20)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("is_closed", models.BooleanField(default=False)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Fiscal Year",
                "verbose_name_plural": "Fiscal Years",
                "ordering": ["company_id", "-start_date"],
                "indexes": [
                    models.Index(
                        fields=["company_id", "start_date", "end_date"],
                        name="acct_fy_company_range_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("company_id", "code"),
                        name="uniq_fiscal_year_company_code",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="chk_fiscal_year_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("voucher_no", models.CharField(max_length=30, unique=True)),
                ("posting_date", models.DateField(help_text="Accounting effective date")),
                ("narration", models.TextField()),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("RECEIPT", "Receipt"),
                            ("LEASE_REVENUE", "Lease revenue"),
                            ("INVOICE", "Invoice"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "source_id",
                    models.CharField(
                        help_text="Receipt id, invoice id or lease revenue key (unit:start:end)",
                        max_length=64,
                    ),
                ),
                ("reference", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("is_reversal", models.BooleanField(default=False)),
                ("reversal_depth", models.PositiveSmallIntegerField(default=0)),
                ("reversal_reason", models.TextField(blank=True, default="")),
                ("company_id", models.PositiveIntegerField()),
                ("created_by_id", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "fiscal_year",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vouchers",
                        to="accounting.fiscalyear",
                    ),
                ),
                (
                    "reversal_of",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversals",
                        to="accounting.voucher",
                    ),
                ),
                (
                    "root_voucher",
                    models.ForeignKey(
                        blank=True,
                        help_text="First voucher of the reversal chain (NULL on originals)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="chain_vouchers",
                        to="accounting.voucher",
                    ),
                ),
                (
                    "reversed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher",
                "verbose_name_plural": "Vouchers",
                "ordering": ["-posting_date", "-id"],
                "permissions": [("reverse_voucher", "Can reverse a posted voucher")],
                "indexes": [
                    models.Index(fields=["source_type", "source_id"], name="acct_voucher_source_idx"),
                    models.Index(fields=["posting_date"], name="acct_voucher_date_idx"),
                    models.Index(fields=["company_id"], name="acct_voucher_company_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="chk_voucher_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("is_reversal", False), ("reversal_of__isnull", True), ("reversal_depth", 0)),
                            models.Q(("is_reversal", True), ("reversal_of__isnull", False), ("reversal_depth__gt", 0)),
                            _connector="OR",
                        ),
                        name="chk_voucher_reversal_shape",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("reversal_of__isnull", False)),
                        fields=("reversal_of",),
                        name="uniq_voucher_single_reversal",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VoucherSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prefix", models.CharField(max_length=10)),
                ("year", models.PositiveSmallIntegerField()),
                ("last_number", models.PositiveIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Voucher Sequence",
                "verbose_name_plural": "Voucher Sequences",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("prefix", "year"),
                        name="uniq_voucher_sequence_prefix_year",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "entry_type",
                    models.CharField(choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")], max_length=6),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["account", "entry_type"], name="acct_ledger_account_type_idx"),
                    models.Index(fields=["voucher", "entry_type"], name="acct_ledger_voucher_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("voucher", "entry_type"),
                        name="uniq_ledger_voucher_entry_type",
                    ),
                ],
            },
        ),
    ]
