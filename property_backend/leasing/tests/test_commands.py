# leasing/tests/test_commands.py

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.models.voucher import Voucher
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.tests.helpers import make_contract, make_unit


class LeaseCommandTests(TestCase):
    def _call(self, *args):
        out = StringIO()
        call_command(*args, stdout=out)
        return out.getvalue()

    def test_seed_is_idempotent(self):
        self._call("seed_lease_chart", "--year", "2024")
        self._call("seed_lease_chart", "--year", "2024")

        self.assertEqual(Account.objects.filter(code="4100").count(), 1)
        self.assertEqual(FiscalYear.objects.filter(code="FY2024").count(), 1)

    def test_post_lease_revenue_posts_each_unit_once(self):
        self._call("seed_lease_chart", "--year", "2024")
        contract = make_contract()
        make_unit(contract, "U-101")
        make_unit(contract, "U-102")

        output = self._call("post_lease_revenue", "--from", "2024-06-01", "--to", "2024-06-30")
        again = self._call("post_lease_revenue", "--from", "2024-06-01", "--to", "2024-06-30")

        self.assertIn("Posted 2, failed 0", output)
        self.assertIn("0 unposted lease revenue entries", again)
        self.assertEqual(Voucher.objects.filter(source_type=Voucher.SOURCE_LEASE_REVENUE).count(), 2)
        self.assertEqual(LeaseRevenuePosting.objects.filter(is_posted=True).count(), 2)

    def test_dry_run_writes_nothing(self):
        make_unit(make_contract())

        output = self._call("post_lease_revenue", "--from", "2024-06-01", "--to", "2024-06-30", "--dry-run")

        self.assertIn("[DRY]", output)
        self.assertFalse(Voucher.objects.exists())

    def test_missing_chart_is_a_command_error(self):
        make_unit(make_contract())

        with self.assertRaises(CommandError):
            self._call("post_lease_revenue", "--from", "2024-06-01", "--to", "2024-06-30")
