# accounts/views.py
"""
Company, membership and session endpoints.

Thin views: resolve the actor, validate input with a serializer, call the
command, translate CommandResult into a response.
"""
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from accounts.commands import (
    add_user_to_company,
    create_company,
    switch_active_company,
    update_company_settings,
    update_membership_role,
)
from accounts.models import CompanyMembership
from .serializers import (
    AddMemberSerializer,
    CompanyCreateSerializer,
    CompanySerializer,
    CompanySettingsSerializer,
    EmailTokenObtainPairSerializer,
    MembershipRoleSerializer,
    MembershipSerializer,
    SwitchCompanySerializer,
    UserSerializer,
)


class LoginView(generics.GenericAPIView):
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class MeView(APIView):
    """GET /api/auth/me/ - current user, active company and memberships."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        user = request.user
        memberships = CompanyMembership.objects.filter(
            user=user, is_active=True
        ).select_related("company")
        return Response({
            "user": UserSerializer(user).data,
            "active_company": CompanySerializer(user.active_company).data if user.active_company else None,
            "companies": [
                {"id": m.company.id, "name": m.company.name, "role": m.role}
                for m in memberships
            ],
        })


class SwitchCompanyView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = SwitchCompanySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = switch_active_company(request.user, serializer.validated_data["company_id"])
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result.data)


class CompanyCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CompanyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = create_company(
            request.user,
            data["name"],
            currency=data["currency"],
            vat_number=data["vat_number"],
            vat_registered=data["vat_registered"],
            fiscal_year_start_month=data["fiscal_year_start_month"],
        )
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CompanySerializer(result.data["company"]).data, status=status.HTTP_201_CREATED)


class CompanySettingsView(APIView):
    """
    GET   /api/companies/settings/ - current company settings
    PATCH /api/companies/settings/ - update fiscal/tax settings
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "company.view")
        return Response(CompanySerializer(actor.company).data)

    def patch(self, request):
        actor = resolve_actor(request)
        serializer = CompanySettingsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_company_settings(actor, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CompanySerializer(result.data["company"]).data)


class MembershipListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "company.view")
        memberships = CompanyMembership.objects.filter(
            company=actor.company
        ).select_related("user").order_by("user__name")
        return Response(MembershipSerializer(memberships, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = add_user_to_company(actor, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MembershipSerializer(result.data).data, status=status.HTTP_201_CREATED)


class MembershipRoleView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        serializer = MembershipRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = update_membership_role(actor, pk, serializer.validated_data["role"])
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MembershipSerializer(result.data).data)
