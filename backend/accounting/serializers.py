# accounting/serializers.py
"""
Serializers for the ledger API.

These serializers are used for:
1. Input validation
2. Output formatting

The actual business logic happens in commands.py.
"""

from rest_framework import serializers

from accounting.amounts import ZERO, money
from .models import Account, BankAccount, LedgerEntry, Transaction


# =============================================================================
# Account Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    has_transactions = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = [
            "id", "code", "name", "account_type", "normal_balance",
            "description", "is_active", "has_transactions",
            "created_at", "updated_at",
        ]
        read_only_fields = fields

    def get_has_transactions(self, obj):
        # Use annotated value if available (from list view), else query
        if hasattr(obj, "_has_transactions"):
            return obj._has_transactions
        return obj.entries.exists()


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AccountUpdateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20, required=False)
    name = serializers.CharField(max_length=255, required=False)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


# =============================================================================
# Bank Account Serializers
# =============================================================================

class BankAccountSerializer(serializers.ModelSerializer):
    ledger_account_code = serializers.CharField(source="ledger_account.code", read_only=True, default=None)

    class Meta:
        model = BankAccount
        fields = [
            "id", "name", "bank_name", "account_number", "ledger_account",
            "ledger_account_code", "opening_balance", "current_balance", "is_active",
        ]
        read_only_fields = fields


class BankAccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    bank_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    account_number = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    opening_balance = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO)
    ledger_account_id = serializers.IntegerField(required=False, allow_null=True)


# =============================================================================
# Transaction Serializers
# =============================================================================

class LedgerEntrySerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            "id", "line_no", "account", "account_code", "account_name",
            "entry_date", "description", "debit", "credit", "is_reversed",
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    entries = LedgerEntrySerializer(many=True, read_only=True)
    reversed_by_id = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            "id", "date", "description", "reference", "transaction_type", "status",
            "total_amount", "vat_rate", "vat_amount", "base_amount", "vat_inclusive",
            "bank_account", "reverses", "reversed_by_id", "source_type", "source_id",
            "created_at", "entries",
        ]
        read_only_fields = fields

    def get_reversed_by_id(self, obj):
        reversal = Transaction.objects.filter(reverses=obj).values_list("id", flat=True).first()
        return reversal


class JournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO, min_value=ZERO)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO, min_value=ZERO)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        debit = money(attrs.get("debit"))
        credit = money(attrs.get("credit"))
        if debit > 0 and credit > 0:
            raise serializers.ValidationError("A line cannot have both debit and credit.")
        if debit == 0 and credit == 0:
            raise serializers.ValidationError("A line needs a debit or a credit amount.")
        return attrs


class JournalCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    description = serializers.CharField(max_length=500)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    transaction_type = serializers.ChoiceField(
        choices=[
            Transaction.TransactionType.JOURNAL,
            Transaction.TransactionType.OPENING_BALANCE,
            Transaction.TransactionType.INCOME,
            Transaction.TransactionType.EXPENSE,
        ],
        default=Transaction.TransactionType.JOURNAL,
    )
    vat_rate = serializers.DecimalField(
        max_digits=6, decimal_places=2, required=False, default=ZERO, min_value=ZERO, max_value=100,
    )
    vat_amount = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=ZERO, min_value=ZERO)
    base_amount = serializers.DecimalField(
        max_digits=18, decimal_places=2, required=False, allow_null=True, default=None, min_value=ZERO,
    )
    vat_inclusive = serializers.BooleanField(required=False, default=False)
    bank_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    lines = JournalLineInputSerializer(many=True)

    def validate_lines(self, value):
        if len(value) < 2:
            raise serializers.ValidationError("A journal needs at least two lines.")
        return value


class ReverseSerializer(serializers.Serializer):
    date = serializers.DateField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


# =============================================================================
# Query parameter serializers
# =============================================================================

class DateRangeQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    export = serializers.ChoiceField(choices=["json", "csv"], required=False, default="json")

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start > end:
            raise serializers.ValidationError("start must be on or before end.")
        return attrs
