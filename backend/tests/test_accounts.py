# tests/test_accounts.py
from decimal import Decimal

import pytest
from django.core.exceptions import PermissionDenied

from accounts.commands import create_company, switch_active_company, update_company_settings
from accounts.models import CompanyMembership
from accounting.chart import seed_default_chart
from accounting.models import Account
from events.models import BusinessEvent
from events.types import EventTypes


@pytest.mark.django_db
class TestCreateCompany:
    def test_owner_membership_and_chart(self, user, company):
        membership = CompanyMembership.objects.get(user=user, company=company)
        assert membership.role == CompanyMembership.Role.OWNER
        assert Account.objects.filter(company=company, code="1100").exists()
        user.refresh_from_db()
        assert user.active_company_id == company.id
        assert BusinessEvent.objects.filter(company=company, event_type=EventTypes.COMPANY_CREATED).count() == 1

    def test_duplicate_names_get_unique_slugs(self, user, company):
        second = create_company(user, "Rigel Test Traders").data["company"]
        assert second.slug == "rigel-test-traders-1"

    def test_rejects_bad_input(self, user):
        assert not create_company(user, "   ").success
        assert not create_company(user, "Acme", fiscal_year_start_month=13).success
        assert not create_company(user, "Acme", currency="RAND").success

    def test_seeding_twice_adds_nothing(self, company):
        assert seed_default_chart(company) == 0


@pytest.mark.django_db
class TestCompanySettings:
    def test_updates_rate_and_emits_event(self, actor, company):
        result = update_company_settings(actor, vat_rate="14")
        assert result.success, result.error
        company.refresh_from_db()
        assert company.vat_rate == Decimal("14.00")
        assert BusinessEvent.objects.filter(
            company=company, event_type=EventTypes.COMPANY_SETTINGS_UPDATED
        ).exists()

    def test_unchanged_values_are_a_no_op(self, actor):
        result = update_company_settings(actor, vat_rate="15", unknown_field="x")
        assert result.success
        assert result.data["message"] == "No changes"

    def test_validation(self, actor):
        assert not update_company_settings(actor, vat_rate="150").success
        assert not update_company_settings(actor, fiscal_year_start_month=0).success
        assert not update_company_settings(actor, fiscal_lock_year=True).success

    def test_lock_with_default_year(self, actor, company):
        result = update_company_settings(actor, fiscal_default_year=2024, fiscal_lock_year=True)
        assert result.success, result.error
        company.refresh_from_db()
        assert company.fiscal_lock_year is True

    def test_viewer_cannot_change_settings(self, viewer):
        with pytest.raises(PermissionDenied):
            update_company_settings(viewer, vat_rate="14")


@pytest.mark.django_db
class TestSwitchCompany:
    def test_switch_between_memberships(self, user, company):
        other = create_company(user, "Second Co").data["company"]

        result = switch_active_company(user, company.id)
        assert result.success
        assert result.data["role"] == CompanyMembership.Role.OWNER
        user.refresh_from_db()
        assert user.active_company_id == company.id

        assert switch_active_company(user, other.id).success

    def test_cannot_switch_without_membership(self, make_member, user):
        outsider_company = create_company(user, "Private Co").data["company"]
        member = make_member("clerk@example.com")
        result = switch_active_company(member, outsider_company.id)
        assert not result.success
        assert "membership" in result.error


@pytest.mark.django_db
class TestEventLogApi:
    def test_filter_and_paginate(self, api_client, actor):
        update_company_settings(actor, vat_rate="14")

        response = api_client.get("/api/events/", {"event_type": "company.created"})
        assert response.status_code == 200
        assert response.data["count"] == 1
        assert response.data["results"][0]["event_type"] == "company.created"

        response = api_client.get("/api/events/", {"limit": 1})
        assert response.data["count"] >= 2
        assert len(response.data["results"]) == 1

    def test_bad_limit(self, api_client):
        response = api_client.get("/api/events/", {"limit": "many"})
        assert response.status_code == 400
