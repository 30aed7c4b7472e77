# leasing/management/commands/post_lease_revenue.py

from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from accounting.services.account_resolver import get_account_for_role
from accounting.services.context import PostingContext
from accounting.services.exceptions import AccountResolutionError
from leasing.services.bulk_operations import OP_POST, apply_bulk
from leasing.services.lease_revenue import list_entries


class Command(BaseCommand):
    help = "Post every unposted lease revenue entry of a period (Dr rent receivable / Cr rental income)."

    def add_arguments(self, parser):
        parser.add_argument("--from", dest="period_start", required=True, help="Period start YYYY-MM-DD")
        parser.add_argument("--to", dest="period_end", required=True, help="Period end YYYY-MM-DD")
        parser.add_argument("--company-id", type=int, default=None)
        parser.add_argument("--posting-date", default=None, help="Voucher date YYYY-MM-DD (default: period end)")
        parser.add_argument("--dry-run", action="store_true", help="List entries without posting")

    def handle(self, *args, **options):
        period_start = parse_date(options["period_start"] or "")
        period_end = parse_date(options["period_end"] or "")
        if not period_start or not period_end or period_end < period_start:
            raise CommandError("--from/--to must be valid YYYY-MM-DD dates with from <= to")

        posting_date = parse_date(options["posting_date"] or "") or period_end
        company_id = options["company_id"] or settings.FINANCE["DEFAULT_COMPANY_ID"]

        entries = list_entries(period_start, period_end, company_id=company_id)
        self.stdout.write(f"{len(entries)} unposted lease revenue entries for {period_start}..{period_end}")

        if options["dry_run"]:
            for entry in entries:
                self.stdout.write(
                    f"  [DRY] {entry.lease_no}/{entry.unit_no} {entry.total_lease_days}d -> {entry.posting_amount}"
                )
            return

        try:
            debit = get_account_for_role("RENT_RECEIVABLE")
            credit = get_account_for_role("RENTAL_INCOME")
        except AccountResolutionError as exc:
            raise CommandError(str(exc)) from exc

        items = [
            {
                "source_type": "LEASE_REVENUE",
                "source_id": entry.source_id,
                "posting_date": posting_date,
                "debit_account_id": debit.pk,
                "credit_account_id": credit.pk,
                "amount": entry.posting_amount,
                "narration": f"Lease revenue {entry.lease_no}/{entry.unit_no} {period_start}..{period_end}",
            }
            for entry in entries
        ]

        result = apply_bulk(
            OP_POST,
            items,
            context=PostingContext(actor_id=None, company_id=company_id),
        )

        for item_error in result.per_item_errors:
            codes = ", ".join(e.code for e in item_error.errors)
            self.stdout.write(self.style.WARNING(f"  {item_error.item_id}: {codes}"))

        self.stdout.write(
            self.style.SUCCESS(
                f"Posted {result.updated_count}, failed {result.failed_count}, skipped {result.skipped_count}."
            )
        )
