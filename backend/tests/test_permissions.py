# tests/test_permissions.py
from datetime import date

import pytest
from django.core.exceptions import PermissionDenied

from accounts.authz import actor_for, require_any
from accounts.models import CompanyMembership
from accounting.commands import post_journal, reverse_transaction
from assets.commands import post_monthly_depreciation, register_asset
from budgeting.commands import create_budget
from reporting.commands import create_trial_balance_line
from sales.commands import create_customer


@pytest.mark.django_db
class TestViewerIsReadOnly:
    def test_cannot_create_sales_documents(self, viewer):
        with pytest.raises(PermissionDenied):
            create_customer(viewer, "Blocked Ltd")

    def test_cannot_post_to_the_ledger(self, viewer, account):
        with pytest.raises(PermissionDenied):
            post_journal(
                viewer,
                date(2025, 4, 1),
                "Blocked",
                [
                    {"account_id": account("1100").id, "debit": 1},
                    {"account_id": account("3000").id, "credit": 1},
                ],
            )

    def test_cannot_manage_assets_or_budgets(self, viewer, account):
        with pytest.raises(PermissionDenied):
            register_asset(viewer, "Desk", "1000", date(2025, 4, 1), 5, funding_source="loan")
        with pytest.raises(PermissionDenied):
            post_monthly_depreciation(viewer, as_of=date(2025, 4, 1))
        with pytest.raises(PermissionDenied):
            create_budget(viewer, account("6000").id, 2025, 4, "100")
        with pytest.raises(PermissionDenied):
            create_trial_balance_line(viewer, "1100", "Bank", debit="1")

    def test_require_any_passes_on_one_grant(self, viewer):
        require_any(viewer, "reports.export", "reports.view")
        with pytest.raises(PermissionDenied):
            require_any(viewer, "reports.export", "tax.view")

    def test_read_permissions_granted(self, viewer):
        assert viewer.has("reports.view")
        assert viewer.has("messages.use")
        assert not viewer.has("reports.export")


@pytest.mark.django_db
def test_user_role_cannot_reverse(make_member, company, actor, account):
    txn = post_journal(
        actor,
        date(2025, 4, 1),
        "Capital",
        [
            {"account_id": account("1100").id, "debit": 100},
            {"account_id": account("3000").id, "credit": 100},
        ],
    ).data
    clerk = actor_for(make_member("clerk@example.com", role=CompanyMembership.Role.USER), company)

    with pytest.raises(PermissionDenied):
        reverse_transaction(clerk, txn.id)


@pytest.mark.django_db
def test_non_member_has_no_actor(company, django_user_model):
    stranger = django_user_model.objects.create_user(email="stranger@example.com", password="pass1234")
    with pytest.raises(PermissionDenied):
        actor_for(stranger, company)
