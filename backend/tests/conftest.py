# tests/conftest.py
"""
Shared fixtures.

``company`` is created through create_company so it carries the seeded
chart of accounts and an OWNER membership for ``user``.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.authz import actor_for
from accounts.commands import create_company
from accounts.models import CompanyMembership
from accounts.permissions import grant_role_defaults
from accounting.commands import create_bank_account
from accounting.models import Account

User = get_user_model()


@pytest.fixture
def user(db):
    return User.objects.create_user(email="owner@example.com", password="pass1234", name="Owner")


@pytest.fixture
def company(user):
    result = create_company(user, "Rigel Test Traders", fiscal_year_start_month=3)
    assert result.success, result.error
    return result.data["company"]


@pytest.fixture
def actor(user, company):
    return actor_for(user, company)


@pytest.fixture
def make_member(company):
    """Factory: add a user to ``company`` with the given role and its default permissions."""

    def _make(email, role=CompanyMembership.Role.USER, name="Member"):
        member = User.objects.create_user(email=email, password="pass1234", name=name)
        membership = CompanyMembership.objects.create(user=member, company=company, role=role)
        grant_role_defaults(membership)
        member.active_company = company
        member.save(update_fields=["active_company"])
        return member

    return _make


@pytest.fixture
def viewer(make_member, company):
    member = make_member("viewer@example.com", role=CompanyMembership.Role.VIEWER, name="Viewer")
    return actor_for(member, company)


@pytest.fixture
def bank_account(actor):
    result = create_bank_account(actor, "Cheque Account", bank_name="FNB", opening_balance=Decimal("10000.00"))
    assert result.success, result.error
    return result.data


@pytest.fixture
def account(company):
    """Lookup helper: account(code) -> Account."""

    def _get(code):
        return Account.objects.get(company=company, code=code)

    return _get


@pytest.fixture
def api_client(user, company):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def today():
    return date(2025, 6, 15)
