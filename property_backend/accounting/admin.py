# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.fiscal_year import FiscalYear
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "is_active",
        "is_postable",
    )
    list_filter = ("account_type", "is_active", "is_postable")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("code", "name", "account_type"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active", "is_postable"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# FISCAL YEAR
# ============================================================


@admin.register(FiscalYear)
class FiscalYearAdmin(admin.ModelAdmin):
    list_display = ("code", "company_id", "start_date", "end_date", "is_closed", "closed_at")
    list_filter = ("is_closed", "company_id")
    search_fields = ("code",)
    ordering = ("company_id", "-start_date")
    readonly_fields = ("created_at",)


# ============================================================
# VOUCHER (READ-ONLY)
# ============================================================


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    can_delete = False
    readonly_fields = ("account", "entry_type", "amount", "created_at")

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = (
        "voucher_no",
        "posting_date",
        "source_type",
        "source_id",
        "amount",
        "is_reversal",
        "reversed_by",
        "company_id",
    )
    list_filter = ("source_type", "is_reversal", "posting_date", "company_id")
    search_fields = ("voucher_no", "source_id", "reference", "narration")
    ordering = ("-posting_date", "-id")
    inlines = [LedgerEntryInline]

    readonly_fields = (
        "voucher_no",
        "posting_date",
        "narration",
        "source_type",
        "source_id",
        "reference",
        "amount",
        "is_reversal",
        "reversal_of",
        "root_voucher",
        "reversal_depth",
        "reversed_by",
        "reversal_reason",
        "company_id",
        "fiscal_year",
        "created_by_id",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# LEDGER ENTRY (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "voucher",
        "account",
        "entry_type",
        "amount",
        "created_at",
    )
    list_filter = ("entry_type", "account")
    search_fields = ("voucher__voucher_no", "account__code", "account__name")
    ordering = ("-created_at",)

    readonly_fields = (
        "voucher",
        "account",
        "entry_type",
        "amount",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
