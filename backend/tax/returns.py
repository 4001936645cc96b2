# tax/returns.py
"""
VAT returns built from transaction headers.

Net VAT is input minus output: positive means SARS owes the company
("VAT Receivable"), negative means the company owes SARS ("VAT Payable").
"""

import calendar
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Optional

from accounting.amounts import ZERO, money
from accounting.models import Transaction

from .vat import CREDIT, INPUT, INPUT_TYPES, OUTPUT, classify, transaction_net, transaction_vat

RETURN_STATUSES = (Transaction.Status.POSTED, Transaction.Status.PENDING)

RECEIVABLE = "VAT Receivable"
PAYABLE = "VAT Payable"
NEUTRAL = "Neutral"


def vat_position(net: Decimal) -> str:
    if net > 0:
        return RECEIVABLE
    if net < 0:
        return PAYABLE
    return NEUTRAL


def period_label(year: int, month: int) -> str:
    """e.g. "January 2025"."""
    return f"{calendar.month_name[month]} {year}"


def _return_transactions(company, start: Optional[date] = None, end: Optional[date] = None):
    qs = Transaction.objects.filter(company=company, status__in=RETURN_STATUSES)
    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    return qs.order_by("date", "id")


def vat_contribution(txn):
    """
    (output, input, detail_type) for one transaction.

    Only non-negative VAT counts. Credit notes come back as negative output.
    """
    kind = classify(txn.transaction_type)
    if kind is None:
        return ZERO, ZERO, None

    vat = max(transaction_vat(txn), ZERO)
    if kind == OUTPUT:
        return vat, ZERO, "Output VAT"
    if kind == INPUT:
        return ZERO, vat, "Input VAT"
    if kind == CREDIT:
        return -vat, ZERO, "Credit Note"
    return ZERO, ZERO, None


def vat201(company, start: Optional[date] = None, end: Optional[date] = None) -> list:
    """
    Monthly VAT201 rows, newest period first.

    Every month that has a transaction gets a row, even when no VAT moved.
    """
    months = OrderedDict()
    for txn in _return_transactions(company, start, end):
        key = (txn.date.year, txn.date.month)
        bucket = months.setdefault(key, {"output": ZERO, "input": ZERO, "details": []})

        output, input_vat, detail_type = vat_contribution(txn)
        bucket["output"] += output
        bucket["input"] += input_vat
        amount = output or input_vat
        if detail_type and amount:
            bucket["details"].append({
                "transaction_id": txn.id,
                "date": txn.date,
                "description": txn.description,
                "reference": txn.reference,
                "type": detail_type,
                "amount": money(amount),
            })

    rows = []
    for (year, month) in sorted(months, reverse=True):
        bucket = months[(year, month)]
        output = money(bucket["output"])
        input_vat = money(bucket["input"])
        net = money(input_vat - output)
        rows.append({
            "period": period_label(year, month),
            "year": year,
            "month": month,
            "vat_output": output,
            "vat_input": input_vat,
            "net": net,
            "position": vat_position(net),
            "details": bucket["details"],
        })
    return rows


def vat201_csv_rows(rows: list) -> list:
    out = [["Period", "VAT Output", "VAT Input", "Net", "Position"]]
    for row in rows:
        out.append([row["period"], str(row["vat_output"]), str(row["vat_input"]), str(row["net"]), row["position"]])
    return out


def annual_vat_report(company, year: int) -> dict:
    """Calendar-year VAT summary; all 12 months are always present."""
    buckets = {m: {"output": ZERO, "input": ZERO} for m in range(1, 13)}
    for txn in _return_transactions(company, date(year, 1, 1), date(year, 12, 31)):
        output, input_vat, _ = vat_contribution(txn)
        buckets[txn.date.month]["output"] += output
        buckets[txn.date.month]["input"] += input_vat

    months = []
    total_output = ZERO
    total_input = ZERO
    for month in range(1, 13):
        output = money(buckets[month]["output"])
        input_vat = money(buckets[month]["input"])
        net = money(input_vat - output)
        total_output += output
        total_input += input_vat
        months.append({
            "month": month,
            "month_name": calendar.month_name[month],
            "vat_output": output,
            "vat_input": input_vat,
            "net": net,
            "position": vat_position(net),
        })

    total_net = money(total_input - total_output)
    return {
        "year": year,
        "months": months,
        "totals": {
            "vat_output": money(total_output),
            "vat_input": money(total_input),
            "net": total_net,
            "position": vat_position(total_net),
        },
    }


def purchase_vat_report(company, start: date, end: date) -> dict:
    """Purchases excluding VAT and input VAT per month, oldest first."""
    qs = _return_transactions(company, start, end).filter(
        transaction_type__in=list(INPUT_TYPES),
        status=Transaction.Status.POSTED,
    )

    months = OrderedDict()
    for txn in qs:
        key = (txn.date.year, txn.date.month)
        bucket = months.setdefault(key, {"net": ZERO, "vat": ZERO, "details": []})
        net = transaction_net(txn)
        vat = max(transaction_vat(txn), ZERO)
        bucket["net"] += net
        bucket["vat"] += vat
        bucket["details"].append({
            "transaction_id": txn.id,
            "date": txn.date,
            "description": txn.description,
            "net": net,
            "vat": vat,
            "total": money(txn.total_amount),
        })

    rows = []
    total_net = ZERO
    total_vat = ZERO
    for (year, month), bucket in sorted(months.items()):
        total_net += bucket["net"]
        total_vat += bucket["vat"]
        rows.append({
            "period": period_label(year, month),
            "purchases_excl_vat": money(bucket["net"]),
            "vat_input": money(bucket["vat"]),
            "details": bucket["details"],
        })

    return {
        "start": start,
        "end": end,
        "rows": rows,
        "totals": {"purchases_excl_vat": money(total_net), "vat_input": money(total_vat)},
    }
