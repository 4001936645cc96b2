# budgeting/reports.py
"""Budget versus actual."""

import calendar
from decimal import Decimal

from accounting.amounts import ZERO, money
from accounting.balances import account_totals, signed_balance
from accounting.fiscal import month_bounds
from accounting.models import Account

from .models import Budget

UNDER = "Under Budget"
OVER = "Over Budget"


def utilisation(actual: Decimal, budgeted: Decimal) -> Decimal:
    """Actual as a percentage of budget; 0 when nothing was budgeted."""
    if budgeted <= 0:
        return ZERO
    return money(actual / budgeted * 100)


def budgets_with_actuals(company, year: int, month: int) -> dict:
    budgets = list(
        Budget.objects.filter(company=company, year=year, month=month).select_related("account")
    )
    start, end = month_bounds(year, month)
    totals = account_totals(company, start, end, accounts=[b.account_id for b in budgets])

    rows = []
    total_budgeted = ZERO
    total_actual = ZERO
    for budget in budgets:
        entry = totals.get(budget.account_id)
        actual = signed_balance(budget.account, entry.debit, entry.credit) if entry else ZERO
        budgeted = money(budget.budgeted_amount)
        variance = budgeted - actual
        total_budgeted += budgeted
        total_actual += actual
        rows.append({
            "id": budget.id,
            "name": budget.name,
            "account_id": budget.account_id,
            "account_code": budget.account.code,
            "account_name": budget.account.name,
            "account_type": budget.account.account_type,
            "year": budget.year,
            "month": budget.month,
            "status": budget.status,
            "notes": budget.notes,
            "budgeted_amount": budgeted,
            "actual_amount": actual,
            "variance": variance,
            "utilisation": utilisation(actual, budgeted),
        })

    return {
        "year": year,
        "month": month,
        "budgets": rows,
        "totals": {
            "budgeted": money(total_budgeted),
            "actual": money(total_actual),
            "variance": money(total_budgeted - total_actual),
            "utilisation": utilisation(total_actual, total_budgeted),
        },
    }


def annual_budget_report(company, year: int) -> dict:
    """
    Expense budget against actual expense for each calendar month.

    Actuals cover every expense account, budgeted or not.
    """
    expense_accounts = {
        a.id: a for a in Account.objects.filter(company=company, account_type=Account.AccountType.EXPENSE)
    }
    budgeted_by_month = {m: ZERO for m in range(1, 13)}
    for budget in Budget.objects.filter(company=company, year=year, account_id__in=list(expense_accounts)):
        budgeted_by_month[budget.month] += money(budget.budgeted_amount)

    rows = []
    total_budgeted = ZERO
    total_actual = ZERO
    for month in range(1, 13):
        start, end = month_bounds(year, month)
        actual = ZERO
        for account_id, entry in account_totals(company, start, end, accounts=list(expense_accounts)).items():
            actual += signed_balance(expense_accounts[account_id], entry.debit, entry.credit)

        budgeted = budgeted_by_month[month]
        variance = budgeted - actual
        total_budgeted += budgeted
        total_actual += actual
        rows.append({
            "month": month,
            "month_name": calendar.month_name[month],
            "budgeted": money(budgeted),
            "actual": money(actual),
            "variance": money(variance),
            "utilisation": utilisation(actual, budgeted),
            "status": UNDER if variance >= 0 else OVER,
        })

    total_variance = money(total_budgeted - total_actual)
    return {
        "year": year,
        "months": rows,
        "totals": {
            "budgeted": money(total_budgeted),
            "actual": money(total_actual),
            "variance": total_variance,
            "utilisation": utilisation(total_actual, total_budgeted),
            "status": UNDER if total_variance >= 0 else OVER,
        },
    }


def annual_report_csv_rows(report: dict) -> list:
    out = [["Month", "Budgeted", "Actual", "Variance", "Utilisation %", "Status"]]
    for row in report["months"]:
        out.append([
            row["month_name"], str(row["budgeted"]), str(row["actual"]),
            str(row["variance"]), str(row["utilisation"]), row["status"],
        ])
    totals = report["totals"]
    out.append([
        "Total", str(totals["budgeted"]), str(totals["actual"]),
        str(totals["variance"]), str(totals["utilisation"]), totals["status"],
    ])
    return out
