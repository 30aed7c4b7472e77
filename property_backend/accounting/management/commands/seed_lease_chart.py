# accounting/management/commands/seed_lease_chart.py

from datetime import date

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.services.account_resolver import code_for

# (role, name, type): codes come from settings.FINANCE["ACCOUNT_CODES"]
ROLE_ACCOUNTS = [
    # ASSETS
    ("CASH", "Cash on Hand", Account.ASSET),
    ("BANK", "Bank Account", Account.ASSET),
    ("CHEQUES_UNDER_COLLECTION", "Cheques Under Collection", Account.ASSET),
    ("RENT_RECEIVABLE", "Rent Receivable", Account.ASSET),
    # LIABILITIES
    ("VAT_PAYABLE", "VAT Payable", Account.LIABILITY),
    ("UNEARNED_RENT", "Unearned Rent", Account.LIABILITY),
    # REVENUE
    ("RENTAL_INCOME", "Rental Income", Account.REVENUE),
]


class Command(BaseCommand):
    help = "Seed the leasing chart of accounts and an open fiscal year for the current calendar year"

    def add_arguments(self, parser):
        parser.add_argument("--company-id", type=int, default=None, help="Company to open the fiscal year for")
        parser.add_argument("--year", type=int, default=None, help="Fiscal year (default: current year)")

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding leasing chart of accounts...")

        created_count = 0
        updated_count = 0

        for role, name, account_type in ROLE_ACCOUNTS:
            acc, acc_created = Account.objects.get_or_create(
                code=code_for(role),
                defaults={
                    "name": name,
                    "account_type": account_type,
                    "is_active": True,
                    "is_postable": True,
                },
            )

            if acc_created:
                created_count += 1
                continue

            needs_update = False
            if acc.name != name:
                acc.name = name
                needs_update = True
            if acc.account_type != account_type:
                acc.account_type = account_type
                needs_update = True
            if not acc.is_active:
                acc.is_active = True
                needs_update = True

            if needs_update:
                acc.save()
                updated_count += 1

        company_id = options["company_id"] or settings.FINANCE["DEFAULT_COMPANY_ID"]
        year = options["year"] or timezone.localdate().year

        _, fy_created = FiscalYear.objects.get_or_create(
            company_id=company_id,
            code=f"FY{year}",
            defaults={
                "start_date": date(year, 1, 1),
                "end_date": date(year, 12, 31),
            },
        )

        self.stdout.write(
            self.style.SUCCESS(
                f"Leasing chart ready. Accounts created: {created_count}, updated: {updated_count}. "
                f"Fiscal year FY{year} for company {company_id}: {'created' if fy_created else 'exists'}."
            )
        )
