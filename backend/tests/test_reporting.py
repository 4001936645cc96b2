# tests/test_reporting.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.commands import post_journal
from reporting.commands import (
    create_trial_balance_line,
    delete_trial_balance_line,
    trial_balance_line_summary,
    update_trial_balance_line,
)
from reporting.services import (
    ANNUAL,
    MONTHLY,
    category_for_code,
    financial_metrics,
    income_statement,
    trial_balance,
    trial_balance_csv_rows,
)


def _post(actor, account, debit_code, credit_code, amount, txn_date):
    result = post_journal(
        actor,
        txn_date,
        f"{debit_code}/{credit_code}",
        [
            {"account_id": account(debit_code).id, "debit": Decimal(amount)},
            {"account_id": account(credit_code).id, "credit": Decimal(amount)},
        ],
    )
    assert result.success, result.error
    return result.data


@pytest.fixture
def ledger(actor, account):
    _post(actor, account, "1100", "3000", "1000.00", date(2025, 4, 1))
    _post(actor, account, "1100", "4000", "600.00", date(2025, 4, 20))
    _post(actor, account, "6000", "1100", "200.00", date(2025, 5, 1))
    _post(actor, account, "1100", "2300", "500.00", date(2025, 5, 2))
    _post(actor, account, "6000", "1100", "100.00", date(2025, 2, 10))


def test_category_for_code():
    assert category_for_code("1100") == "Current Assets"
    assert category_for_code("1500") == "Non-current Assets"
    assert category_for_code("2200") == "Current Liabilities"
    assert category_for_code("2600") == "Non-current Liabilities"
    assert category_for_code("3900") == "Equity"
    assert category_for_code("4000") == "Income"
    assert category_for_code("9600") == "Expenses"
    assert category_for_code("ABC") == "Other"


@pytest.mark.django_db
class TestTrialBalance:
    def test_monthly_cutoff(self, company, ledger):
        report = trial_balance(company, MONTHLY, 2025, 4)

        by_code = {line["account_code"]: line for line in report["lines"]}
        assert report["cutoff"] == date(2025, 4, 30)
        assert by_code["1100"]["debit"] == Decimal("1600.00")
        assert by_code["1100"]["credit"] == Decimal("100.00")
        assert "2300" not in by_code
        assert by_code["3900"]["debit"] == Decimal("0.00")
        assert report["total_debit"] == report["total_credit"]
        assert report["is_balanced"] is True

    def test_annual_uses_fiscal_year_end(self, company, ledger):
        report = trial_balance(company, ANNUAL, 2025)

        assert report["cutoff"] == date(2026, 2, 28)
        assert {line["account_code"] for line in report["lines"]} >= {"1100", "2300", "3000", "4000", "6000"}
        assert [c["category"] for c in report["categories"]][:2] == ["Current Assets", "Current Liabilities"]

    def test_monthly_needs_a_month(self, company):
        with pytest.raises(ValueError):
            trial_balance(company, MONTHLY, 2025)

    def test_csv_rows_end_with_totals(self, company, ledger):
        rows = trial_balance_csv_rows(trial_balance(company, MONTHLY, 2025, 5))
        assert rows[0][0] == "Account Code"
        assert rows[-1][1] == "Total"


@pytest.mark.django_db
def test_income_statement(company, ledger):
    report = income_statement(company, date(2025, 3, 1), date(2025, 5, 31))

    assert report["total_income"] == Decimal("600.00")
    assert report["total_expenses"] == Decimal("200.00")
    assert report["net_profit"] == Decimal("400.00")
    assert report["expenses"][0]["account_code"] == "6000"


@pytest.mark.django_db
def test_financial_metrics(company, ledger, today):
    metrics = financial_metrics(company, today=today)

    assert metrics["bank_balance"] == Decimal("1800.00")
    assert metrics["total_assets"] == Decimal("1800.00")
    assert metrics["total_liabilities"] == Decimal("500.00")
    assert metrics["total_equity"] == Decimal("1300.00")
    assert metrics["current_ratio"] == Decimal("3.60")
    assert metrics["ytd_start"] == date(2025, 3, 1)
    assert metrics["ytd_expenses"] == Decimal("200.00")
    assert metrics["ytd_net_profit"] == Decimal("400.00")


@pytest.mark.django_db
class TestTrialBalanceLines:
    def test_summary_requires_exact_balance(self, actor):
        create_trial_balance_line(actor, "1100", "Bank", debit="100.00")
        line = create_trial_balance_line(actor, "3000", "Capital", credit="99.99").data

        summary = trial_balance_line_summary(actor.company)
        assert summary["count"] == 2
        assert summary["difference"] == Decimal("0.01")
        assert summary["is_balanced"] is False

        assert update_trial_balance_line(actor, line.id, credit="100.00").success
        assert trial_balance_line_summary(actor.company)["is_balanced"] is True

    def test_validation(self, actor):
        assert not create_trial_balance_line(actor, "", "Bank", debit="1").success
        assert not create_trial_balance_line(actor, "1100", "Bank", debit="-1").success

        line = create_trial_balance_line(actor, "1100", "Bank", debit="1").data
        assert not update_trial_balance_line(actor, line.id, account_name="").success

    def test_delete(self, actor):
        line = create_trial_balance_line(actor, "1100", "Bank", debit="1").data

        assert delete_trial_balance_line(actor, line.id).success
        assert trial_balance_line_summary(actor.company)["count"] == 0
