# budgeting/admin.py
from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin

from .models import Budget


@admin.register(Budget)
class BudgetAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "account", "year", "month", "budgeted_amount", "status", "company"]
    list_filter = ["company", "year", "status"]
    search_fields = ["name", "account__code", "account__name"]
