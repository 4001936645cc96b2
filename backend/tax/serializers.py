# tax/serializers.py
from rest_framework import serializers


class YearQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=1900, max_value=2999)


class IncomeTaxInputSerializer(serializers.Serializer):
    profit_before_tax = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, allow_null=True)
    non_deductible = serializers.DecimalField(max_digits=18, decimal_places=2, default=0)
    non_taxable = serializers.DecimalField(max_digits=18, decimal_places=2, default=0)
    temporary_increase = serializers.DecimalField(max_digits=18, decimal_places=2, default=0)
    temporary_decrease = serializers.DecimalField(max_digits=18, decimal_places=2, default=0)
    rate = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, min_value=0, max_value=100)
    fiscal_year = serializers.IntegerField(required=False)


class PayeInputSerializer(serializers.Serializer):
    gross = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    taxable_allowances = serializers.DecimalField(max_digits=18, decimal_places=2, default=0, min_value=0)
    fringe_benefits = serializers.DecimalField(max_digits=18, decimal_places=2, default=0, min_value=0)

    def validate(self, attrs):
        if attrs["period_end"] < attrs["period_start"]:
            raise serializers.ValidationError("period_end must be on or after period_start.")
        return attrs


class VatSplitInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    rate = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, min_value=0, max_value=100)
    inclusive = serializers.BooleanField(default=True)
