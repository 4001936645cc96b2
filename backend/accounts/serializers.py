from django.contrib.auth import authenticate
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Company, CompanyMembership, User


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = (
            "id",
            "name",
            "slug",
            "currency",
            "vat_number",
            "vat_registered",
            "vat_rate",
            "corporate_tax_rate",
            "fiscal_year_start_month",
            "fiscal_default_year",
            "fiscal_lock_year",
            "payroll_tax_config",
            "is_active",
        )
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "email", "name")


class MembershipSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = CompanyMembership
        fields = ("id", "user", "role", "is_active", "joined_at")
        read_only_fields = fields


class CompanyCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    currency = serializers.CharField(max_length=3, default="ZAR")
    vat_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    vat_registered = serializers.BooleanField(default=True)
    fiscal_year_start_month = serializers.IntegerField(min_value=1, max_value=12, default=3)

    def validate_currency(self, value: str):
        return value.upper()


class CompanySettingsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    currency = serializers.CharField(max_length=3, required=False)
    vat_number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    vat_registered = serializers.BooleanField(required=False)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    corporate_tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False,
    )
    fiscal_year_start_month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    fiscal_default_year = serializers.IntegerField(min_value=1900, max_value=2200, required=False, allow_null=True)
    fiscal_lock_year = serializers.BooleanField(required=False)
    payroll_tax_config = serializers.JSONField(required=False, allow_null=True)

    def validate_currency(self, value: str):
        return value.upper()


class SwitchCompanySerializer(serializers.Serializer):
    company_id = serializers.IntegerField()


class AddMemberSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=CompanyMembership.Role.choices, default=CompanyMembership.Role.USER)


class MembershipRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=CompanyMembership.Role.choices)


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    username_field = User.EMAIL_FIELD

    def validate(self, attrs):
        authenticate_kwargs = {
            self.username_field: attrs.get("email"),
            "password": attrs.get("password"),
        }
        user = authenticate(request=self.context.get("request"), **authenticate_kwargs)
        if not user:
            raise AuthenticationFailed("Invalid credentials")
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}
