# accounting/statements.py
"""
Running-balance statements shared by customer and supplier statements.

Debits increase the balance owed, credits reduce it.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List

from accounting.amounts import ZERO, money

# Same-day ordering: documents before settlements.
KIND_ORDER = {
    "invoice": 0,
    "purchase_order": 0,
    "bill": 0,
    "credit_note": 1,
    "receipt": 2,
    "payment": 2,
}


@dataclass
class StatementLine:
    date: date
    kind: str
    reference: str
    description: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass
class Statement:
    start: date
    end: date
    opening_balance: Decimal
    lines: List[StatementLine] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return money(sum((line.debit for line in self.lines), ZERO))

    @property
    def total_credit(self) -> Decimal:
        return money(sum((line.credit for line in self.lines), ZERO))

    @property
    def closing_balance(self) -> Decimal:
        return money(self.opening_balance + self.total_debit - self.total_credit)

    def as_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "opening_balance": self.opening_balance,
            "closing_balance": self.closing_balance,
            "total_debit": self.total_debit,
            "total_credit": self.total_credit,
            "lines": [
                {
                    "date": line.date,
                    "type": line.kind,
                    "reference": line.reference,
                    "description": line.description,
                    "debit": line.debit,
                    "credit": line.credit,
                    "balance": line.balance,
                }
                for line in self.lines
            ],
        }


def build_statement(start: date, end: date, opening_balance, lines: Iterable[StatementLine]) -> Statement:
    """Sort lines by date and fill in the running balance."""
    ordered = sorted(lines, key=lambda line: (line.date, KIND_ORDER.get(line.kind, 9), line.reference))
    balance = money(opening_balance)
    for line in ordered:
        line.debit = money(line.debit)
        line.credit = money(line.credit)
        balance = money(balance + line.debit - line.credit)
        line.balance = balance
    return Statement(start=start, end=end, opening_balance=money(opening_balance), lines=ordered)


def statement_csv_rows(statement: Statement) -> list:
    """Rows for CSV export, header first."""
    rows = [["Date", "Type", "Reference", "Description", "Debit", "Credit", "Balance"]]
    rows.append([statement.start.isoformat(), "opening", "", "Opening balance", "", "", str(statement.opening_balance)])
    for line in statement.lines:
        rows.append([
            line.date.isoformat(), line.kind, line.reference, line.description,
            str(line.debit), str(line.credit), str(line.balance),
        ])
    rows.append([statement.end.isoformat(), "closing", "", "Closing balance", "", "", str(statement.closing_balance)])
    return rows
