# tests/test_fiscal.py
from datetime import date

from accounting.fiscal import (
    add_months,
    fiscal_months,
    fiscal_year_dates,
    fiscal_year_for_date,
    period_dates,
    resolve_range,
    selected_fiscal_year,
)


class TestFiscalYear:
    def test_march_start_spans_into_next_calendar_year(self):
        assert fiscal_year_dates(3, 2024) == (date(2024, 3, 1), date(2025, 2, 28))

    def test_january_start_is_calendar_year(self):
        assert fiscal_year_dates(1, 2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_invalid_start_month_falls_back_to_january(self):
        assert fiscal_year_dates(13, 2024) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_date_before_start_month_belongs_to_previous_year(self):
        assert fiscal_year_for_date(date(2025, 2, 10), 3) == 2024
        assert fiscal_year_for_date(date(2025, 3, 1), 3) == 2025

    def test_last_period_of_march_year_is_february(self):
        assert period_dates(2023, 3, 12) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_fiscal_months_in_order(self):
        months = fiscal_months(2024, 3)
        assert months[0] == (2024, 3)
        assert months[-1] == (2025, 2)
        assert len(months) == 12


class TestAddMonths:
    def test_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_crosses_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


class TestSelectedFiscalYear:
    def test_uses_year_containing_today(self, company):
        assert selected_fiscal_year(company, today=date(2025, 6, 15)) == 2025
        assert selected_fiscal_year(company, today=date(2025, 1, 15)) == 2024

    def test_locked_year_wins(self, company):
        company.fiscal_lock_year = True
        company.fiscal_default_year = 2022
        assert selected_fiscal_year(company, today=date(2025, 6, 15)) == 2022

    def test_resolve_range_fills_missing_bounds(self, company):
        start, end = resolve_range(company, None, date(2025, 4, 30), today=date(2025, 6, 15))
        assert start == date(2025, 3, 1)
        assert end == date(2025, 4, 30)
