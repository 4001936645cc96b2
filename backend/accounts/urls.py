# accounts/urls.py
"""
URL configuration for session, company and membership endpoints.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    CompanyCreateView,
    CompanySettingsView,
    LoginView,
    MeView,
    MembershipListView,
    MembershipRoleView,
    SwitchCompanyView,
)

app_name = "accounts"

urlpatterns = [
    # ==========================================================================
    # Authentication
    # ==========================================================================
    path("auth/token/", LoginView.as_view(), name="token"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/me/", MeView.as_view(), name="me"),
    path("auth/switch-company/", SwitchCompanyView.as_view(), name="switch-company"),

    # ==========================================================================
    # Companies
    # ==========================================================================
    path("companies/", CompanyCreateView.as_view(), name="company-create"),
    path("companies/settings/", CompanySettingsView.as_view(), name="company-settings"),

    # ==========================================================================
    # Memberships
    # ==========================================================================
    path("memberships/", MembershipListView.as_view(), name="membership-list"),
    path("memberships/<int:pk>/role/", MembershipRoleView.as_view(), name="membership-role"),
]
