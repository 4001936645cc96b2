# accounting/admin.py
"""
Django admin configuration for ledger models.

The admin is for viewing only. Postings MUST go through the command layer
(accounting/commands.py), which validates balance and emits audit events.
Other apps reuse ReadOnlyModelAdmin for their posted documents.
"""

from django.contrib import admin

from .models import Account, BankAccount, CompanySequence, LedgerEntry, Transaction


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Base admin class for rows that only commands may write."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ReadOnlyInline(admin.TabularInline):
    extra = 0

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class LedgerEntryInline(ReadOnlyInline):
    model = LedgerEntry
    fields = ["line_no", "account", "description", "debit", "credit", "is_reversed"]
    readonly_fields = fields


@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    list_display = ["code", "name", "account_type", "normal_balance", "is_active", "company"]
    list_filter = ["company", "account_type", "is_active"]
    search_fields = ["code", "name", "description"]
    list_select_related = ["company"]
    ordering = ["company", "code"]


@admin.register(BankAccount)
class BankAccountAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "bank_name", "account_number", "current_balance", "company"]
    list_filter = ["company", "is_active"]
    search_fields = ["name", "bank_name", "account_number"]


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyModelAdmin):
    list_display = [
        "id", "date", "transaction_type", "status", "reference",
        "total_amount", "vat_amount", "company",
    ]
    list_filter = ["company", "transaction_type", "status", "date"]
    search_fields = ["reference", "description"]
    date_hierarchy = "date"
    list_select_related = ["company"]
    inlines = [LedgerEntryInline]


@admin.register(CompanySequence)
class CompanySequenceAdmin(ReadOnlyModelAdmin):
    list_display = ["company", "name", "next_value", "updated_at"]
    list_filter = ["company"]
