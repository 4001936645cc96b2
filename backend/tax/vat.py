# tax/vat.py
"""
VAT arithmetic.

A rate is a percentage (15 means 15 %). Amounts are rounded to cents with
ROUND_HALF_UP after each step, matching what gets stored on documents.

Transaction classification for returns:
- output VAT: SALES, RECEIPT and INCOME transactions
- input VAT: PURCHASE, BILL and EXPENSE transactions
- CREDIT_NOTE transactions reduce output VAT
"""

from collections import namedtuple
from decimal import Decimal
from typing import Iterable, Optional

from accounting.amounts import ZERO, money, percent_of, to_decimal
from accounting.models import Transaction

HUNDRED = Decimal("100")

VatSplit = namedtuple("VatSplit", ["net", "vat", "gross"])
LineTotals = namedtuple("LineTotals", ["amount", "tax", "total"])
DocumentTotals = namedtuple("DocumentTotals", ["subtotal", "tax", "total"])

T = Transaction.TransactionType

OUTPUT_TYPES = frozenset({T.SALES, T.RECEIPT, T.INCOME})
INPUT_TYPES = frozenset({T.PURCHASE, T.BILL, T.EXPENSE})
CREDIT_TYPES = frozenset({T.CREDIT_NOTE})

OUTPUT = "output"
INPUT = "input"
CREDIT = "credit"


def split_amount(amount, rate, inclusive: bool = True) -> VatSplit:
    """
    Split an amount into net, VAT and gross.

    inclusive: ``amount`` already contains VAT, net = amount / (1 + rate/100)
    exclusive: ``amount`` is net, vat = amount * rate / 100
    """
    amount = to_decimal(amount)
    rate = to_decimal(rate)

    if rate <= 0:
        value = money(amount)
        return VatSplit(value, ZERO, value)

    if inclusive:
        gross = money(amount)
        net = money(amount / (1 + rate / HUNDRED))
        return VatSplit(net, gross - net, gross)

    net = money(amount)
    vat = percent_of(amount, rate)
    return VatSplit(net, vat, net + vat)


def line_totals(quantity, unit_price, rate) -> LineTotals:
    amount = money(to_decimal(quantity) * to_decimal(unit_price))
    tax = percent_of(amount, rate)
    return LineTotals(amount, tax, amount + tax)


def document_totals(lines: Iterable) -> DocumentTotals:
    """Sum LineTotals (or objects with ``amount``/``tax_amount``)."""
    subtotal = ZERO
    tax = ZERO
    for line in lines:
        if isinstance(line, LineTotals):
            subtotal += line.amount
            tax += line.tax
        else:
            subtotal += to_decimal(line.amount)
            tax += to_decimal(line.tax_amount)
    subtotal = money(subtotal)
    tax = money(tax)
    return DocumentTotals(subtotal, tax, subtotal + tax)


def effective_rate(net, vat) -> Decimal:
    """vat / net as a percentage to 2 dp; 0 when net is 0."""
    net = to_decimal(net)
    if not net:
        return ZERO
    return money(to_decimal(vat) / net * HUNDRED)


def company_vat_rate(company) -> Decimal:
    if not company.vat_registered:
        return ZERO
    return to_decimal(company.vat_rate)


def classify(transaction_type: str) -> Optional[str]:
    if transaction_type in OUTPUT_TYPES:
        return OUTPUT
    if transaction_type in INPUT_TYPES:
        return INPUT
    if transaction_type in CREDIT_TYPES:
        return CREDIT
    return None


def transaction_vat(txn) -> Decimal:
    """
    VAT carried by a transaction.

    The stored ``vat_amount`` wins. Older rows only carry a rate, so the
    amount is derived from the total and base amount.
    """
    stored = money(txn.vat_amount)
    if stored:
        return stored

    rate = to_decimal(txn.vat_rate)
    if rate <= 0:
        return ZERO

    total = to_decimal(txn.total_amount)
    base = to_decimal(txn.base_amount) if txn.base_amount else None

    if txn.vat_inclusive:
        if base is None:
            base = total / (1 + rate / HUNDRED)
        return money(total - base)

    if base is None:
        return ZERO
    return money(total - base)


def transaction_net(txn) -> Decimal:
    """Amount excluding VAT."""
    if txn.base_amount:
        return money(txn.base_amount)
    return money(to_decimal(txn.total_amount) - transaction_vat(txn))
