# assets/depreciation.py
"""
Straight-line depreciation.

An asset bought on or before the 15th depreciates from its purchase
month, otherwise from the following month. Accumulated depreciation at a
date covers the whole months between the start month and the date's
month, and never exceeds cost.
"""

from collections import namedtuple
from datetime import date
from decimal import Decimal

from accounting.amounts import ZERO, money, to_decimal
from accounting.fiscal import add_months, fiscal_year_dates, fiscal_year_for_date

from .models import FixedAsset

Depreciation = namedtuple(
    "Depreciation",
    ["annual_depreciation", "accumulated_depreciation", "net_book_value", "months_depreciated"],
)

MID_MONTH_CUTOFF = 15


def depreciation_start(purchase_date: date) -> date:
    start = purchase_date.replace(day=1)
    if purchase_date.day > MID_MONTH_CUTOFF:
        start = add_months(start, 1)
    return start


def months_between(start: date, as_of: date) -> int:
    return max(0, (as_of.year - start.year) * 12 + (as_of.month - start.month))


def calculate_depreciation(cost, purchase_date: date, useful_life_years, as_of: date) -> Depreciation:
    cost = to_decimal(cost)
    life = to_decimal(useful_life_years)
    if life <= 0:
        raise ValueError("useful_life_years must be greater than zero")

    months = months_between(depreciation_start(purchase_date), as_of)
    annual = cost / life
    accumulated = min(annual / Decimal(12) * months, cost)
    return Depreciation(
        annual_depreciation=money(annual),
        accumulated_depreciation=money(accumulated),
        net_book_value=money(cost - accumulated),
        months_depreciated=months,
    )


def accumulated_for(asset: FixedAsset, as_of: date) -> Decimal:
    return calculate_depreciation(
        asset.cost, asset.purchase_date, asset.useful_life_years, as_of,
    ).accumulated_depreciation


def _assets_held_at(company, as_of: date):
    """Non-draft assets bought by ``as_of`` and not yet disposed of on that date."""
    qs = FixedAsset.objects.filter(company=company, purchase_date__lte=as_of).exclude(
        status=FixedAsset.Status.DRAFT,
    )
    for asset in qs:
        if asset.is_disposed and asset.disposal_date and asset.disposal_date <= as_of:
            continue
        yield asset


def ppe_net_book_value_as_of(company, as_of: date) -> Decimal:
    total = ZERO
    for asset in _assets_held_at(company, as_of):
        total += money(asset.cost) - accumulated_for(asset, as_of)
    return money(total)


def accumulated_depreciation_as_of(company, as_of: date) -> Decimal:
    total = ZERO
    for asset in _assets_held_at(company, as_of):
        total += accumulated_for(asset, as_of)
    return money(total)


def depreciation_expense_for_period(company, start: date, end: date) -> Decimal:
    """
    Depreciation charged between ``start`` and ``end``.

    Disposed assets stop depreciating on their disposal date.
    """
    qs = FixedAsset.objects.filter(company=company, purchase_date__lte=end).exclude(
        status=FixedAsset.Status.DRAFT,
    )
    total = ZERO
    for asset in qs:
        cap = end
        if asset.is_disposed and asset.disposal_date and asset.disposal_date < cap:
            cap = asset.disposal_date
        charge = accumulated_for(asset, cap) - accumulated_for(asset, start)
        total += max(charge, ZERO)
    return money(total)


def depreciation_schedule(asset: FixedAsset, start_month: int = 1) -> list:
    """Per fiscal year: opening NBV, depreciation and closing NBV until fully depreciated."""
    cost = money(asset.cost)
    if cost <= 0:
        return []

    fiscal_year = fiscal_year_for_date(depreciation_start(asset.purchase_date), start_month)
    rows = []
    while True:
        fy_start, fy_end = fiscal_year_dates(start_month, fiscal_year)
        next_start = add_months(fy_start, 12)
        opening = cost - accumulated_for(asset, fy_start)
        closing = cost - accumulated_for(asset, next_start)
        rows.append({
            "fiscal_year": fiscal_year,
            "start": fy_start,
            "end": fy_end,
            "opening_nbv": opening,
            "depreciation": money(opening - closing),
            "closing_nbv": closing,
        })
        if closing <= 0:
            break
        fiscal_year += 1
    return rows
