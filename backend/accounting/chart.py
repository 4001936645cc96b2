# accounting/chart.py
"""Default chart of accounts seeded for new companies."""

from django.db import transaction

from accounting.models import Account
from accounting.resolution import STANDARD_ACCOUNTS

A = Account.AccountType

# Accounts seeded on top of the standard posting accounts.
EXTRA_ACCOUNTS = [
    ("1000", "Petty Cash", A.ASSET),
    ("1400", "Prepaid Expenses", A.ASSET),
    ("2100", "Accrued Liabilities", A.LIABILITY),
    ("2400", "PAYE Payable", A.LIABILITY),
    ("2410", "UIF Payable", A.LIABILITY),
    ("2420", "SDL Payable", A.LIABILITY),
    ("2600", "Income Tax Payable", A.LIABILITY),
    ("3200", "Drawings", A.EQUITY),
    ("4200", "Interest Received", A.INCOME),
    ("6200", "Salaries and Wages", A.EXPENSE),
    ("6300", "Rent", A.EXPENSE),
    ("6400", "Utilities", A.EXPENSE),
    ("6500", "Bank Charges", A.EXPENSE),
    ("6600", "Telephone and Internet", A.EXPENSE),
    ("6700", "Insurance", A.EXPENSE),
    ("6800", "Advertising", A.EXPENSE),
    ("8000", "Income Tax Expense", A.EXPENSE),
]


def default_chart() -> list[tuple[str, str, str]]:
    rows = [(s.code, s.name, s.account_type) for s in STANDARD_ACCOUNTS.values()]
    rows.extend(EXTRA_ACCOUNTS)
    return sorted(rows)


@transaction.atomic
def seed_default_chart(company) -> int:
    """Create any missing default accounts. Returns how many were created."""
    existing = set(Account.objects.filter(company=company).values_list("code", flat=True))
    created = 0
    for code, name, account_type in default_chart():
        if code in existing:
            continue
        Account.objects.create(company=company, code=code, name=name, account_type=account_type)
        created += 1
    return created
