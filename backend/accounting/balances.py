# accounting/balances.py
"""
Account balances straight from ledger entries.

A reversed transaction stays in the ledger next to its mirror REVERSAL,
so both POSTED and REVERSED transactions count and cancel out.
"""

from collections import namedtuple
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Sum

from accounting.amounts import ZERO, money
from accounting.models import Account, LedgerEntry, Transaction

LEDGER_STATUSES = (Transaction.Status.POSTED, Transaction.Status.REVERSED)

AccountTotals = namedtuple("AccountTotals", ["debit", "credit"])


def ledger_entries(company, start: Optional[date] = None, end: Optional[date] = None):
    qs = LedgerEntry.objects.filter(company=company, transaction__status__in=LEDGER_STATUSES)
    if start:
        qs = qs.filter(entry_date__gte=start)
    if end:
        qs = qs.filter(entry_date__lte=end)
    return qs


def account_totals(company, start: Optional[date] = None, end: Optional[date] = None, accounts=None) -> dict:
    """{account_id: AccountTotals} for accounts with entries in the range."""
    qs = ledger_entries(company, start, end)
    if accounts is not None:
        qs = qs.filter(account__in=accounts)
    rows = qs.values("account_id").annotate(debit=Sum("debit"), credit=Sum("credit"))
    return {
        row["account_id"]: AccountTotals(money(row["debit"] or ZERO), money(row["credit"] or ZERO))
        for row in rows
    }


def signed_balance(account: Account, debit: Decimal, credit: Decimal) -> Decimal:
    """Balance in the account's normal direction."""
    if account.normal_balance == Account.NormalBalance.DEBIT:
        return money(debit - credit)
    return money(credit - debit)
