# accounting/apps.py

"""
ACCOUNTING APP CONFIG

General ledger:
- Account master
- Fiscal years (period locks)
- Vouchers + ledger legs (immutable)
- Posting + reversal engines
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
