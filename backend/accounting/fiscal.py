# accounting/fiscal.py
"""
Fiscal calendar arithmetic.

Fiscal year N starts on day 1 of the company's start month in calendar
year N and ends the day before the same month a year later. A January
start gives plain calendar years; the SA default (March) gives
1 March 2024 - 28 February 2025 for fiscal year 2024.
"""

import calendar
from datetime import date, timedelta
from typing import Optional


def normalize_start_month(start_month) -> int:
    try:
        month = int(start_month)
    except (TypeError, ValueError):
        return 1
    return month if 1 <= month <= 12 else 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def fiscal_year_for_date(target_date: date, start_month: int) -> int:
    start_month = normalize_start_month(start_month)
    return target_date.year - 1 if target_date.month < start_month else target_date.year


def fiscal_year_dates(start_month: int, fiscal_year: int) -> tuple[date, date]:
    start_month = normalize_start_month(start_month)
    start = date(fiscal_year, start_month, 1)
    if start_month == 1:
        return start, date(fiscal_year, 12, 31)
    end = date(fiscal_year + 1, start_month, 1) - timedelta(days=1)
    return start, end


def calendar_year_for_fiscal_month(start_month: int, fiscal_year: int, month: int) -> int:
    """Calendar year a given month (1-12) falls in within a fiscal year."""
    start_month = normalize_start_month(start_month)
    return fiscal_year + 1 if month < start_month else fiscal_year


def period_dates(fiscal_year: int, start_month: int, period: int) -> tuple[date, date]:
    """First and last day of the n-th month (1-12) of a fiscal year."""
    start_month = normalize_start_month(start_month)
    month_index = (start_month - 1) + (period - 1)
    year = fiscal_year + (month_index // 12)
    month = (month_index % 12) + 1
    return month_bounds(year, month)


def fiscal_months(fiscal_year: int, start_month: int) -> list[tuple[int, int]]:
    """(year, month) pairs of a fiscal year in order."""
    return [
        (start.year, start.month)
        for start, _ in (period_dates(fiscal_year, start_month, p) for p in range(1, 13))
    ]


def selected_fiscal_year(company, today: Optional[date] = None) -> int:
    """
    The fiscal year reports should default to.

    A locked company with a default year always reports on that year;
    otherwise the fiscal year containing ``today``.
    """
    today = today or date.today()
    if company.fiscal_lock_year and company.fiscal_default_year:
        return int(company.fiscal_default_year)
    return fiscal_year_for_date(today, company.fiscal_year_start_month)


def add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def resolve_range(company, start: Optional[date] = None, end: Optional[date] = None, today: Optional[date] = None):
    """Fill missing report bounds from the company's selected fiscal year."""
    if start and end:
        return start, end
    fy_start, fy_end = fiscal_year_dates(
        company.fiscal_year_start_month,
        selected_fiscal_year(company, today),
    )
    return start or fy_start, end or fy_end
