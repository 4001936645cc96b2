# reporting/admin.py
from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin

from .models import TrialBalanceLine


@admin.register(TrialBalanceLine)
class TrialBalanceLineAdmin(ReadOnlyModelAdmin):
    list_display = ["account_code", "account_name", "debit", "credit", "company"]
    list_filter = ["company"]
    search_fields = ["account_code", "account_name"]
