# tax/paye.py
"""
Employees' tax (PAYE), UIF and SDL for one pay period.

The period's taxable pay is annualised over 365 days, taxed with the
bracket table, reduced by the primary rebate and brought back to the
period. UIF is 1 % from the employee and 1 % from the employer on gross
pay capped at the UIF ceiling; SDL is the employer's levy on gross pay.

A company can override the tables through ``Company.payroll_tax_config``
using the same shape as DEFAULT_TAX_CONFIG.
"""

from collections import namedtuple
from datetime import date
from decimal import Decimal
from typing import Optional

from accounting.amounts import ZERO, money, to_decimal

DAYS_IN_YEAR = Decimal("365")
UIF_RATE = Decimal("0.01")

# SARS 2024/25 tables.
DEFAULT_TAX_CONFIG = {
    "brackets": [
        {"up_to": 237100, "rate": 0.18, "base": 0},
        {"up_to": 370500, "rate": 0.26, "base": 42678},
        {"up_to": 512800, "rate": 0.31, "base": 77362},
        {"up_to": 673000, "rate": 0.36, "base": 121475},
        {"up_to": 857900, "rate": 0.39, "base": 179147},
        {"up_to": 1145900, "rate": 0.41, "base": 251258},
        {"up_to": None, "rate": 0.45, "base": 388638},
    ],
    "rebates": {"primary": 17235},
    "uif_cap": 17712,
    "sdl_rate": 0.01,
}

PayeResult = namedtuple(
    "PayeResult",
    ["period_days", "taxable", "annual_taxable", "annual_tax", "paye", "uif_employee", "uif_employer", "sdl"],
)


def tax_config_for(company) -> dict:
    return company.payroll_tax_config or DEFAULT_TAX_CONFIG


def period_days(period_start: date, period_end: date) -> int:
    return max(1, (period_end - period_start).days + 1)


def annual_bracket_tax(annual_income: Decimal, brackets: list) -> Decimal:
    """``base + (income - previous cap) x rate`` for the bracket the income falls in."""
    previous_cap = ZERO
    for bracket in brackets:
        cap = bracket.get("up_to")
        if cap is not None and annual_income > to_decimal(cap):
            previous_cap = to_decimal(cap)
            continue
        excess = max(ZERO, annual_income - previous_cap)
        return money(to_decimal(bracket.get("base")) + excess * to_decimal(bracket.get("rate")))
    return ZERO


def calculate_paye(
    gross,
    period_start: date,
    period_end: date,
    taxable_allowances=ZERO,
    fringe_benefits=ZERO,
    config: Optional[dict] = None,
) -> PayeResult:
    config = config or DEFAULT_TAX_CONFIG
    gross = to_decimal(gross)
    days = period_days(period_start, period_end)

    taxable = gross + to_decimal(taxable_allowances) + to_decimal(fringe_benefits)
    annual_taxable = money(taxable * DAYS_IN_YEAR / days)
    annual_tax = annual_bracket_tax(annual_taxable, config.get("brackets", []))

    rebate = to_decimal((config.get("rebates") or {}).get("primary"))
    annual_after_rebate = max(ZERO, annual_tax - rebate)
    paye = money(annual_after_rebate * days / DAYS_IN_YEAR)

    uif_base = min(gross, to_decimal(config.get("uif_cap"), default=Decimal("17712")))
    uif = money(uif_base * UIF_RATE)
    sdl = money(gross * to_decimal(config.get("sdl_rate"), default=Decimal("0.01")))

    return PayeResult(
        period_days=days,
        taxable=money(taxable),
        annual_taxable=annual_taxable,
        annual_tax=annual_tax,
        paye=paye,
        uif_employee=uif,
        uif_employer=uif,
        sdl=sdl,
    )
