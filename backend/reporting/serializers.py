# reporting/serializers.py
from rest_framework import serializers

from .models import TrialBalanceLine
from .services import ANNUAL, MONTHLY


class TrialBalanceQuerySerializer(serializers.Serializer):
    period_type = serializers.ChoiceField(choices=[MONTHLY, ANNUAL], default=MONTHLY)
    year = serializers.IntegerField(min_value=1900, max_value=2999)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    export = serializers.ChoiceField(choices=["json", "csv"], default="json")

    def validate(self, attrs):
        if attrs["period_type"] == MONTHLY and not attrs.get("month"):
            raise serializers.ValidationError({"month": "Required for a monthly trial balance."})
        return attrs


class TrialBalanceLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrialBalanceLine
        fields = ["id", "account_code", "account_name", "debit", "credit", "created_at", "updated_at"]
        read_only_fields = fields


class TrialBalanceLineInputSerializer(serializers.Serializer):
    account_code = serializers.CharField(max_length=20)
    account_name = serializers.CharField(max_length=255)
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, default=0)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, default=0)


class AsOfQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)
