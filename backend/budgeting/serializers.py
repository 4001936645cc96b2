# budgeting/serializers.py
from rest_framework import serializers

from .models import Budget


class BudgetSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = Budget
        fields = [
            "id", "account", "account_code", "account_name", "name", "year",
            "month", "budgeted_amount", "notes", "status", "created_at",
        ]
        read_only_fields = fields


class BudgetCreateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    year = serializers.IntegerField(min_value=1900, max_value=2999)
    month = serializers.IntegerField(min_value=1, max_value=12)
    budgeted_amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=Budget.Status.choices, default=Budget.Status.ACTIVE)


class BudgetUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    budgeted_amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Budget.Status.choices, required=False)


class BudgetPeriodQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1900, max_value=2999)
    month = serializers.IntegerField(min_value=1, max_value=12)


class BudgetYearQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1900, max_value=2999)
    export = serializers.ChoiceField(choices=["json", "csv"], default="json")
