# tests/test_assets.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.balances import account_totals
from assets.commands import dispose_asset, post_monthly_depreciation, register_asset
from assets.depreciation import (
    accumulated_depreciation_as_of,
    calculate_depreciation,
    depreciation_expense_for_period,
    depreciation_schedule,
    depreciation_start,
    ppe_net_book_value_as_of,
)
from assets.models import FixedAsset


class TestCalculation:
    def test_mid_month_rule(self):
        assert depreciation_start(date(2024, 1, 15)) == date(2024, 1, 1)
        assert depreciation_start(date(2024, 1, 16)) == date(2024, 2, 1)
        assert depreciation_start(date(2024, 12, 20)) == date(2025, 1, 1)

    def test_whole_months_straight_line(self):
        result = calculate_depreciation(12000, date(2024, 1, 10), 5, date(2024, 7, 1))

        assert result.annual_depreciation == Decimal("2400.00")
        assert result.months_depreciated == 6
        assert result.accumulated_depreciation == Decimal("1200.00")
        assert result.net_book_value == Decimal("10800.00")

    def test_late_purchase_starts_next_month(self):
        result = calculate_depreciation(12000, date(2024, 1, 20), 5, date(2024, 7, 1))
        assert result.accumulated_depreciation == Decimal("1000.00")

    def test_never_exceeds_cost(self):
        result = calculate_depreciation(12000, date(2020, 1, 1), 5, date(2035, 1, 1))

        assert result.accumulated_depreciation == Decimal("12000.00")
        assert result.net_book_value == Decimal("0.00")

    def test_nothing_before_start(self):
        result = calculate_depreciation(12000, date(2024, 6, 1), 5, date(2024, 3, 1))
        assert result.accumulated_depreciation == Decimal("0.00")

    def test_zero_life_is_rejected(self):
        with pytest.raises(ValueError):
            calculate_depreciation(12000, date(2024, 1, 1), 0, date(2024, 6, 1))

    def test_schedule_runs_until_fully_depreciated(self):
        asset = FixedAsset(cost=Decimal("12000.00"), purchase_date=date(2024, 3, 5), useful_life_years=Decimal("2"))

        rows = depreciation_schedule(asset, start_month=3)

        assert [row["fiscal_year"] for row in rows] == [2024, 2025]
        assert rows[0]["opening_nbv"] == Decimal("12000.00")
        assert rows[0]["depreciation"] == Decimal("6000.00")
        assert rows[1]["closing_nbv"] == Decimal("0.00")


@pytest.mark.django_db
class TestRegistration:
    def test_bank_funded_asset(self, actor, bank_account, account):
        result = register_asset(
            actor, "Delivery van", "6000.00", date(2025, 4, 1), 5,
            funding_source=FixedAsset.FundingSource.BANK, bank_account_id=bank_account.id,
        )

        assert result.success, result.error
        asset = result.data
        assert asset.status == FixedAsset.Status.ACTIVE
        assert asset.acquisition_transaction.reference == f"FA-{asset.id}"
        assert account_totals(actor.company)[account("1500").id].debit == Decimal("6000.00")
        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("4000.00")

    def test_bank_funding_needs_a_bank_account(self, actor):
        assert not register_asset(actor, "Laptop", "15000", date(2025, 4, 1), 3).success

    def test_loan_funded_asset(self, actor, account):
        register_asset(actor, "Forklift", "50000", date(2025, 4, 1), 10, funding_source="loan")
        assert account_totals(actor.company)[account("2300").id].credit == Decimal("50000.00")

    def test_opening_asset_carries_depreciation(self, actor, account):
        result = register_asset(
            actor, "Office furniture", "12000", date(2023, 3, 1), 5,
            funding_source="opening", as_of=date(2025, 3, 1),
        )

        asset = result.data
        assert asset.accumulated_depreciation == Decimal("4800.00")
        totals = account_totals(actor.company)
        assert totals[account("3900").id].credit == Decimal("7200.00")
        assert totals[account("1510").id].credit == Decimal("4800.00")

    def test_invalid_input(self, actor):
        assert not register_asset(actor, "", "1000", date(2025, 4, 1), 5, funding_source="loan").success
        assert not register_asset(actor, "Desk", "0", date(2025, 4, 1), 5, funding_source="loan").success
        assert not register_asset(actor, "Desk", "1000", date(2025, 4, 1), 0, funding_source="loan").success
        assert not register_asset(actor, "Desk", "1000", date(2025, 4, 1), 5, funding_source="lease").success


@pytest.fixture
def machine(actor):
    return register_asset(actor, "CNC machine", "12000", date(2024, 3, 1), 5, funding_source="loan").data


@pytest.mark.django_db
class TestDepreciationRun:
    def test_catch_up_is_idempotent(self, actor, machine, account):
        first = post_monthly_depreciation(actor, as_of=date(2024, 6, 1))
        assert first.data["total"] == Decimal("600.00")

        second = post_monthly_depreciation(actor, as_of=date(2024, 6, 1))
        assert second.data["total"] == Decimal("0.00")
        assert second.data["assets"] == []

        third = post_monthly_depreciation(actor, as_of=date(2024, 7, 1))
        assert third.data["total"] == Decimal("200.00")

        totals = account_totals(actor.company)
        assert totals[account("6100").id].debit == Decimal("800.00")
        assert totals[account("1510").id].credit == Decimal("800.00")
        machine.refresh_from_db()
        assert machine.last_depreciation_date == date(2024, 7, 1)

    def test_register_reporting(self, company, machine):
        assert accumulated_depreciation_as_of(company, date(2025, 3, 1)) == Decimal("2400.00")
        assert ppe_net_book_value_as_of(company, date(2025, 3, 1)) == Decimal("9600.00")
        assert depreciation_expense_for_period(company, date(2024, 3, 1), date(2024, 9, 1)) == Decimal("1200.00")


@pytest.mark.django_db
class TestDisposal:
    def test_sale_above_book_value_books_gain(self, actor, machine, bank_account, account):
        result = dispose_asset(actor, machine.id, date(2025, 3, 1), proceeds="10000.00", bank_account_id=bank_account.id)

        assert result.success, result.error
        asset = result.data
        assert asset.status == FixedAsset.Status.SOLD
        assert asset.accumulated_depreciation == Decimal("2400.00")
        totals = account_totals(actor.company)
        assert totals[account("9500").id].credit == Decimal("400.00")
        assert totals[account("1500").id].credit == Decimal("12000.00")
        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("20000.00")

    def test_scrapping_books_loss(self, actor, machine, account):
        result = dispose_asset(actor, machine.id, date(2025, 3, 1), disposal_type="scrapped")

        assert result.data.status == FixedAsset.Status.SCRAPPED
        assert account_totals(actor.company)[account("9600").id].debit == Decimal("9600.00")

    def test_disposed_asset_drops_out_of_register(self, actor, company, machine):
        dispose_asset(actor, machine.id, date(2025, 3, 1), disposal_type="scrapped")

        assert ppe_net_book_value_as_of(company, date(2025, 6, 1)) == Decimal("0.00")
        assert not dispose_asset(actor, machine.id, date(2025, 4, 1), disposal_type="scrapped").success

    def test_rejects_bad_disposals(self, actor, machine):
        assert not dispose_asset(actor, machine.id, date(2024, 1, 1)).success
        assert not dispose_asset(actor, machine.id, date(2025, 3, 1), disposal_type="donated").success
        assert not dispose_asset(actor, machine.id, date(2025, 3, 1), proceeds="500.00").success


@pytest.mark.django_db
def test_scheduled_run_posts_for_each_company(company, machine):
    from assets.tasks import post_monthly_depreciation_all

    results = post_monthly_depreciation_all("2024-06-01")

    assert results[company.id]["total"] == "600.00"
    assert results[company.id]["assets"] == 1


@pytest.mark.django_db
def test_one_failing_company_does_not_stop_the_run(user, company, machine, monkeypatch):
    from accounts.commands import create_company
    from assets import commands
    from assets.tasks import post_monthly_depreciation_all

    broken = create_company(user, "Broken Books").data["company"]
    real_run = commands.post_monthly_depreciation

    def run(actor, as_of):
        if actor.company.id == broken.id:
            raise RuntimeError("ledger unavailable")
        return real_run(actor, as_of)

    monkeypatch.setattr(commands, "post_monthly_depreciation", run)

    results = post_monthly_depreciation_all("2024-06-01")

    assert results[company.id]["total"] == "600.00"
    assert "ledger unavailable" in results[broken.id]["error"]
