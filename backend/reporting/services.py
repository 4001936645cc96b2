# reporting/services.py
"""
Read-side reports computed from the ledger.

Nothing here writes; every figure is recomputed from ledger entries on
request.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from accounting.amounts import ZERO, money
from accounting.balances import account_totals, signed_balance
from accounting.fiscal import fiscal_year_dates, fiscal_year_for_date, month_bounds
from accounting.models import Account

MONTHLY = "monthly"
ANNUAL = "annual"

PINNED_ACCOUNTS = (
    ("1100", "Bank"),
    ("3900", "Opening Balance Equity"),
)

CATEGORY_ORDER = [
    "Non-current Assets",
    "Current Assets",
    "Non-current Liabilities",
    "Current Liabilities",
    "Equity",
    "Income",
    "Expenses",
    "Other",
]

BALANCE_TOLERANCE = Decimal("0.01")


def category_for_code(code: str) -> str:
    code = str(code or "")
    first = code[:1]
    try:
        number = int(code)
    except ValueError:
        number = None

    if first == "1":
        return "Current Assets" if number is not None and number < 1500 else "Non-current Assets"
    if first == "2":
        return "Current Liabilities" if number is not None and number < 2500 else "Non-current Liabilities"
    if first == "3":
        return "Equity"
    if first == "4":
        return "Income"
    if first in ("5", "6", "7", "8", "9"):
        return "Expenses"
    return "Other"


def trial_balance_cutoff(company, period_type: str, year: int, month: Optional[int] = None) -> date:
    if period_type == MONTHLY:
        if month is None:
            raise ValueError("month is required for a monthly trial balance")
        return month_bounds(year, month)[1]
    if period_type == ANNUAL:
        return fiscal_year_dates(company.fiscal_year_start_month, year)[1]
    raise ValueError(f"Unknown period type: {period_type}")


# =============================================================================
# Trial balance
# =============================================================================

def trial_balance(company, period_type: str, year: int, month: Optional[int] = None) -> dict:
    """
    Debit and credit totals per account up to the period cutoff.

    Bank (1100) and Opening Balance Equity (3900) are always listed, as
    zero placeholders when the company has no such account.
    """
    cutoff = trial_balance_cutoff(company, period_type, year, month)
    totals = account_totals(company, end=cutoff)
    pinned_codes = {code for code, _ in PINNED_ACCOUNTS}

    lines = []
    for account in Account.objects.filter(company=company, is_active=True).order_by("code"):
        entry = totals.get(account.id)
        debit = entry.debit if entry else ZERO
        credit = entry.credit if entry else ZERO
        if not (debit or credit) and account.code not in pinned_codes:
            continue
        lines.append({
            "account_id": account.id,
            "account_code": account.code,
            "account_name": account.name,
            "account_type": account.account_type,
            "category": category_for_code(account.code),
            "debit": debit,
            "credit": credit,
        })

    listed = {line["account_code"] for line in lines}
    for code, name in PINNED_ACCOUNTS:
        if code not in listed:
            lines.append({
                "account_id": None,
                "account_code": code,
                "account_name": name,
                "account_type": None,
                "category": category_for_code(code),
                "debit": ZERO,
                "credit": ZERO,
            })
    lines.sort(key=lambda line: line["account_code"])

    categories = []
    for category in CATEGORY_ORDER:
        members = [line for line in lines if line["category"] == category]
        if not members:
            continue
        categories.append({
            "category": category,
            "lines": members,
            "debit": money(sum((line["debit"] for line in members), ZERO)),
            "credit": money(sum((line["credit"] for line in members), ZERO)),
        })

    total_debit = money(sum((line["debit"] for line in lines), ZERO))
    total_credit = money(sum((line["credit"] for line in lines), ZERO))
    difference = abs(total_debit - total_credit)
    return {
        "period_type": period_type,
        "year": year,
        "month": month,
        "cutoff": cutoff,
        "lines": lines,
        "categories": categories,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "difference": difference,
        "is_balanced": difference < BALANCE_TOLERANCE,
    }


def trial_balance_csv_rows(report: dict) -> list:
    out = [["Account Code", "Account Name", "Category", "Debit", "Credit"]]
    for line in report["lines"]:
        out.append([
            line["account_code"], line["account_name"], line["category"],
            str(line["debit"]), str(line["credit"]),
        ])
    out.append(["", "Total", "", str(report["total_debit"]), str(report["total_credit"])])
    return out


# =============================================================================
# Income statement & dashboard metrics
# =============================================================================

def _balances_by_type(company, account_type: str, start=None, end=None) -> list:
    accounts = list(Account.objects.filter(company=company, account_type=account_type).order_by("code"))
    totals = account_totals(company, start, end, accounts=[a.id for a in accounts])
    rows = []
    for account in accounts:
        entry = totals.get(account.id)
        if entry is None:
            continue
        rows.append((account, signed_balance(account, entry.debit, entry.credit)))
    return rows


def income_statement(company, start: date, end: date) -> dict:
    income = _balances_by_type(company, Account.AccountType.INCOME, start, end)
    expenses = _balances_by_type(company, Account.AccountType.EXPENSE, start, end)

    total_income = money(sum((amount for _, amount in income), ZERO))
    total_expenses = money(sum((amount for _, amount in expenses), ZERO))
    return {
        "start": start,
        "end": end,
        "income": [
            {"account_code": a.code, "account_name": a.name, "amount": amount} for a, amount in income
        ],
        "expenses": [
            {"account_code": a.code, "account_name": a.name, "amount": amount} for a, amount in expenses
        ],
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_profit": money(total_income - total_expenses),
    }


def income_statement_csv_rows(report: dict) -> list:
    out = [["Section", "Account Code", "Account Name", "Amount"]]
    for line in report["income"]:
        out.append(["Income", line["account_code"], line["account_name"], str(line["amount"])])
    out.append(["Income", "", "Total Income", str(report["total_income"])])
    for line in report["expenses"]:
        out.append(["Expenses", line["account_code"], line["account_name"], str(line["amount"])])
    out.append(["Expenses", "", "Total Expenses", str(report["total_expenses"])])
    out.append(["", "", "Net Profit", str(report["net_profit"])])
    return out


def _is_bank_account(account: Account) -> bool:
    return account.code == "1100" or "bank" in account.name.lower()


def financial_metrics(company, today: Optional[date] = None) -> dict:
    """
    Dashboard figures.

    Balance sheet figures cover all time; income and expenses run from the
    start of the fiscal year containing ``today``.
    """
    today = today or date.today()

    assets = _balances_by_type(company, Account.AccountType.ASSET)
    liabilities = _balances_by_type(company, Account.AccountType.LIABILITY)

    total_assets = money(sum((amount for _, amount in assets), ZERO))
    total_liabilities = money(sum((amount for _, amount in liabilities), ZERO))
    bank_balance = money(sum((amount for a, amount in assets if _is_bank_account(a)), ZERO))
    current_assets = money(sum((amount for a, amount in assets if a.code.startswith("1")), ZERO))
    current_liabilities = money(sum((amount for a, amount in liabilities if a.code.startswith("2")), ZERO))

    fy_start, _ = fiscal_year_dates(
        company.fiscal_year_start_month,
        fiscal_year_for_date(today, company.fiscal_year_start_month),
    )
    ytd = income_statement(company, fy_start, today)

    current_ratio = None
    if current_liabilities > 0:
        current_ratio = money(current_assets / current_liabilities)

    return {
        "as_of": today,
        "total_assets": total_assets,
        "total_liabilities": total_liabilities,
        "total_equity": money(total_assets - total_liabilities),
        "bank_balance": bank_balance,
        "current_assets": current_assets,
        "current_liabilities": current_liabilities,
        "current_ratio": current_ratio,
        "ytd_start": fy_start,
        "ytd_income": ytd["total_income"],
        "ytd_expenses": ytd["total_expenses"],
        "ytd_net_profit": ytd["net_profit"],
    }
