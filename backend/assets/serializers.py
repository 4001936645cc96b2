# assets/serializers.py
from rest_framework import serializers

from .models import FixedAsset


class FixedAssetSerializer(serializers.ModelSerializer):
    net_book_value = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    asset_account_code = serializers.CharField(source="asset_account.code", read_only=True, default=None)

    class Meta:
        model = FixedAsset
        fields = [
            "id", "description", "cost", "purchase_date", "useful_life_years",
            "depreciation_method", "accumulated_depreciation", "net_book_value",
            "last_depreciation_date", "status", "funding_source", "asset_account",
            "asset_account_code", "acquisition_transaction", "disposal_date",
            "disposal_amount", "disposal_transaction", "created_at",
        ]
        read_only_fields = fields


class AssetRegisterSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    cost = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    purchase_date = serializers.DateField()
    useful_life_years = serializers.DecimalField(max_digits=6, decimal_places=2)
    funding_source = serializers.ChoiceField(
        choices=FixedAsset.FundingSource.choices,
        default=FixedAsset.FundingSource.BANK,
    )
    bank_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    asset_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    as_of = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["funding_source"] == FixedAsset.FundingSource.BANK and not attrs.get("bank_account_id"):
            raise serializers.ValidationError({"bank_account_id": "Required for bank-funded assets."})
        return attrs


class DepreciationRunSerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False, allow_null=True, default=None)


class DisposalSerializer(serializers.Serializer):
    disposal_date = serializers.DateField()
    proceeds = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, default=0)
    bank_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    disposal_type = serializers.ChoiceField(choices=["sold", "scrapped", "disposed"], default="sold")


class AsOfQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)
