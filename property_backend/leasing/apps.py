# leasing/apps.py

"""
LEASING APP CONFIG

Lease receivables:
- Contracts + contract units (rent terms)
- Invoices + receipts + allocations
- Lease revenue accruals
"""

from django.apps import AppConfig


class LeasingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "leasing"
    verbose_name = "Leasing"
