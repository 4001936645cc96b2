# assets/admin.py
from django.contrib import admin

from accounting.admin import ReadOnlyModelAdmin

from .models import FixedAsset


@admin.register(FixedAsset)
class FixedAssetAdmin(ReadOnlyModelAdmin):
    list_display = [
        "description", "cost", "purchase_date", "useful_life_years",
        "accumulated_depreciation", "status", "company",
    ]
    list_filter = ["company", "status", "funding_source"]
    search_fields = ["description"]
    date_hierarchy = "purchase_date"
