# leasing/admin.py

"""
Leasing admin.

Contracts, units, invoices and receipts are editable master data.
Financial state (paid/balance, posted flags, allocations, lease revenue
postings) is owned by the engines and shown read-only here.
"""

from django.contrib import admin

from leasing.models.contract import Contract, ContractUnit
from leasing.models.invoice import Invoice
from leasing.models.lease_revenue import LeaseRevenuePosting
from leasing.models.receipt import Receipt, ReceiptAllocation


class ContractUnitInline(admin.TabularInline):
    model = ContractUnit
    extra = 0
    fields = (
        "unit_no",
        "property_name",
        "monthly_rent",
        "yearly_rent",
        "installment_count",
        "lease_start",
        "lease_end",
    )


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ("contract_no", "customer_name", "company_id", "start_date", "end_date")
    list_filter = ("company_id",)
    search_fields = ("contract_no", "customer_name")
    ordering = ("contract_no",)
    inlines = [ContractUnitInline]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_no",
        "customer_name",
        "due_date",
        "total_amount",
        "paid_amount",
        "balance_amount",
        "status",
        "is_posted",
    )
    list_filter = ("status", "is_posted", "company_id")
    search_fields = ("invoice_no", "customer_name")
    ordering = ("-due_date",)
    readonly_fields = (
        "total_amount",
        "paid_amount",
        "balance_amount",
        "is_posted",
        "voucher",
        "version",
        "created_at",
        "updated_at",
    )


class ReceiptAllocationInline(admin.TabularInline):
    model = ReceiptAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("invoice", "amount", "created_by_id", "created_at")

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = (
        "receipt_no",
        "customer_name",
        "received_date",
        "amount",
        "payment_type",
        "payment_status",
        "is_posted",
    )
    list_filter = ("payment_type", "payment_status", "is_posted", "company_id")
    search_fields = ("receipt_no", "customer_name", "cheque_no", "bank_reference")
    ordering = ("-received_date",)
    readonly_fields = ("is_posted", "voucher", "created_at", "updated_at")
    inlines = [ReceiptAllocationInline]


@admin.register(LeaseRevenuePosting)
class LeaseRevenuePostingAdmin(admin.ModelAdmin):
    list_display = ("contract_unit", "period_start", "period_end", "amount", "is_posted", "voucher")
    list_filter = ("is_posted", "period_start")
    ordering = ("-period_start",)
    readonly_fields = (
        "contract_unit",
        "period_start",
        "period_end",
        "amount",
        "is_posted",
        "voucher",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
