# tests/test_budgeting.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.commands import post_journal, reverse_transaction
from budgeting.commands import DUPLICATE_PERIOD, create_budget, delete_budget, update_budget
from budgeting.models import Budget
from budgeting.reports import OVER, UNDER, annual_budget_report, budgets_with_actuals, utilisation


def _spend(actor, account, code, amount, txn_date):
    result = post_journal(
        actor,
        txn_date,
        "Expense",
        [
            {"account_id": account(code).id, "debit": Decimal(amount)},
            {"account_id": account("1100").id, "credit": Decimal(amount)},
        ],
    )
    assert result.success, result.error
    return result.data


def test_utilisation():
    assert utilisation(Decimal("800"), Decimal("1000")) == Decimal("80.00")
    assert utilisation(Decimal("800"), Decimal("0")) == Decimal("0")


@pytest.mark.django_db
class TestBudgetCommands:
    def test_create_defaults_name_to_account(self, actor, account):
        result = create_budget(actor, account("6000").id, 2025, 4, "1000")

        assert result.success, result.error
        assert result.data.name == "Operating Expenses"
        assert result.data.status == Budget.Status.ACTIVE
        assert result.data.budgeted_amount == Decimal("1000.00")

    def test_only_income_and_expense_accounts(self, actor, account):
        assert create_budget(actor, account("4000").id, 2025, 4, "5000").success
        assert not create_budget(actor, account("1100").id, 2025, 4, "5000").success

    def test_one_entry_per_account_and_month(self, actor, account):
        create_budget(actor, account("6000").id, 2025, 4, "1000")

        result = create_budget(actor, account("6000").id, 2025, 4, "2000")

        assert not result.success
        assert result.error == DUPLICATE_PERIOD
        assert create_budget(actor, account("6000").id, 2025, 5, "2000").success

    def test_month_must_be_valid(self, actor, account):
        assert not create_budget(actor, account("6000").id, 2025, 13, "1000").success

    def test_update_and_delete(self, actor, account):
        budget = create_budget(actor, account("6000").id, 2025, 4, "1000").data

        updated = update_budget(actor, budget.id, budgeted_amount="1500", status=Budget.Status.APPROVED)
        assert updated.success, updated.error
        assert updated.data.budgeted_amount == Decimal("1500.00")
        assert updated.data.status == Budget.Status.APPROVED

        assert delete_budget(actor, budget.id).success
        assert not Budget.objects.filter(pk=budget.id).exists()


@pytest.mark.django_db
class TestBudgetReports:
    def test_monthly_actuals_and_variance(self, actor, account):
        create_budget(actor, account("6000").id, 2025, 4, "1000")
        _spend(actor, account, "6000", "800.00", date(2025, 4, 10))
        _spend(actor, account, "6000", "999.00", date(2025, 5, 1))

        report = budgets_with_actuals(actor.company, 2025, 4)

        row = report["budgets"][0]
        assert row["actual_amount"] == Decimal("800.00")
        assert row["variance"] == Decimal("200.00")
        assert row["utilisation"] == Decimal("80.00")
        assert report["totals"]["budgeted"] == Decimal("1000.00")

    def test_reversed_spend_nets_to_zero(self, actor, account):
        create_budget(actor, account("6000").id, 2025, 4, "1000")
        txn = _spend(actor, account, "6000", "300.00", date(2025, 4, 10))
        reverse_transaction(actor, txn.id, reason="Posted twice")

        row = budgets_with_actuals(actor.company, 2025, 4)["budgets"][0]
        assert row["actual_amount"] == Decimal("0.00")

    def test_annual_report(self, actor, account):
        create_budget(actor, account("6000").id, 2025, 4, "1000")
        _spend(actor, account, "6000", "800.00", date(2025, 4, 10))
        _spend(actor, account, "6100", "50.00", date(2025, 5, 3))

        report = annual_budget_report(actor.company, 2025)

        april = report["months"][3]
        may = report["months"][4]
        assert len(report["months"]) == 12
        assert april["status"] == UNDER
        assert april["actual"] == Decimal("800.00")
        assert may["status"] == OVER
        assert report["totals"]["actual"] == Decimal("850.00")
        assert report["totals"]["variance"] == Decimal("150.00")
        assert report["totals"]["status"] == UNDER
