# accounting/resolution.py
"""
Standard account lookup.

Postings refer to accounts by role ("bank", "receivable", "vat_output").
A role resolves to the company's account with the standard code, then to
an account of the right type whose name contains one of the role's
keywords, and optionally to any account of that type.
"""

from collections import namedtuple
from typing import Iterable, Optional

from accounting.models import Account

StandardAccount = namedtuple("StandardAccount", ["code", "name", "account_type", "keywords"])

A = Account.AccountType

STANDARD_ACCOUNTS = {
    "bank": StandardAccount("1100", "Bank", A.ASSET, ("bank", "cash")),
    "receivable": StandardAccount("1200", "Accounts Receivable", A.ASSET, ("receivable", "debtors")),
    "inventory": StandardAccount("1300", "Inventory", A.ASSET, ("inventory", "stock")),
    "ppe": StandardAccount("1500", "Property, Plant & Equipment", A.ASSET, ("equipment", "property", "fixed asset")),
    "accumulated_depreciation": StandardAccount(
        "1510", "Accumulated Depreciation", A.ASSET, ("accumulated depreciation",),
    ),
    "payable": StandardAccount("2000", "Accounts Payable", A.LIABILITY, ("payable", "creditors")),
    "vat_input": StandardAccount("2110", "VAT Input", A.LIABILITY, ("vat input", "input vat")),
    "vat_output": StandardAccount("2200", "VAT Output", A.LIABILITY, ("vat output", "output vat")),
    "loan": StandardAccount("2300", "Loans Payable", A.LIABILITY, ("loan",)),
    "owner_equity": StandardAccount("3000", "Owner's Equity", A.EQUITY, ("capital", "owner")),
    "retained_earnings": StandardAccount("3100", "Retained Earnings", A.EQUITY, ("retained",)),
    "opening_equity": StandardAccount("3900", "Opening Balance Equity", A.EQUITY, ("opening balance",)),
    "revenue": StandardAccount("4000", "Sales Revenue", A.INCOME, ("sales", "revenue")),
    "other_income": StandardAccount("4100", "Other Income", A.INCOME, ("other income",)),
    "cogs": StandardAccount("5000", "Cost of Sales", A.EXPENSE, ("cost of sales", "cost of goods")),
    "operating_expense": StandardAccount("6000", "Operating Expenses", A.EXPENSE, ("operating expense",)),
    "depreciation_expense": StandardAccount("6100", "Depreciation Expense", A.EXPENSE, ("depreciation",)),
    "gain_on_disposal": StandardAccount("9500", "Gain on Sale of Assets", A.INCOME, ("gain on sale",)),
    "loss_on_disposal": StandardAccount("9600", "Loss on Sale of Assets", A.EXPENSE, ("loss on sale",)),
}


def find_account(
    company,
    account_type: str,
    codes: Iterable[str] = (),
    names: Iterable[str] = (),
    fallback_to_type: bool = False,
) -> Optional[Account]:
    """
    Find an active account: by code, then by name keyword, then (when
    ``fallback_to_type``) the lowest-coded account of the type.
    """
    qs = Account.objects.filter(company=company, account_type=account_type, is_active=True)

    codes = list(codes)
    if codes:
        by_code = {a.code: a for a in qs.filter(code__in=codes)}
        for code in codes:
            if code in by_code:
                return by_code[code]

    for keyword in names:
        match = qs.filter(name__icontains=keyword).order_by("code").first()
        if match:
            return match

    if fallback_to_type:
        return qs.order_by("code").first()
    return None


def find_standard(company, role: str, fallback_to_type: bool = False) -> Optional[Account]:
    spec = STANDARD_ACCOUNTS[role]
    return find_account(
        company,
        spec.account_type,
        codes=[spec.code],
        names=spec.keywords,
        fallback_to_type=fallback_to_type,
    )


def ensure_account(company, role: str) -> Account:
    """
    Resolve a standard account, creating it when the company has none.

    Only code and keyword matches count here; a random account of the same
    type is never picked for a specific role.
    """
    account = find_standard(company, role)
    if account:
        return account

    spec = STANDARD_ACCOUNTS[role]
    account, _ = Account.objects.get_or_create(
        company=company,
        code=spec.code,
        defaults={"name": spec.name, "account_type": spec.account_type},
    )
    if not account.is_active:
        account.is_active = True
        account.save(update_fields=["is_active"])
    return account


def bank_ledger_account(bank_account) -> Account:
    """Ledger account a bank account posts to."""
    if bank_account.ledger_account_id and bank_account.ledger_account.is_active:
        return bank_account.ledger_account
    return ensure_account(bank_account.company, "bank")
