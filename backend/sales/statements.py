# sales/statements.py
"""
Customer statements.

Opening balance = invoices - receipts - issued credit notes dated before
the start. In range, invoices are debits and receipts/credit notes are
credits. Draft and cancelled invoices never appear.
"""

from datetime import date

from django.db.models import Sum

from accounting.amounts import ZERO, money
from accounting.statements import Statement, StatementLine, build_statement

from .models import CreditNote, Invoice, Receipt

STATEMENT_INVOICE_STATUSES = (
    Invoice.Status.SENT,
    Invoice.Status.PARTIALLY_PAID,
    Invoice.Status.PAID,
)


def _total(qs, field: str):
    return qs.aggregate(total=Sum(field))["total"] or ZERO


def customer_balance_before(company, customer, start: date):
    invoices = Invoice.objects.filter(
        company=company,
        customer=customer,
        status__in=STATEMENT_INVOICE_STATUSES,
        invoice_date__lt=start,
    )
    receipts = Receipt.objects.filter(company=company, customer=customer, receipt_date__lt=start)
    credits = CreditNote.objects.filter(
        company=company,
        customer=customer,
        status=CreditNote.Status.ISSUED,
        credit_note_date__lt=start,
    )
    return money(
        _total(invoices, "total_amount")
        - _total(receipts, "amount")
        - _total(credits, "total_amount")
    )


def customer_statement(company, customer, start: date, end: date) -> Statement:
    lines = []

    invoices = Invoice.objects.filter(
        company=company,
        customer=customer,
        status__in=STATEMENT_INVOICE_STATUSES,
        invoice_date__gte=start,
        invoice_date__lte=end,
    )
    for inv in invoices:
        lines.append(StatementLine(
            date=inv.invoice_date,
            kind="invoice",
            reference=inv.invoice_number,
            description=f"Invoice {inv.invoice_number}",
            debit=inv.total_amount,
        ))

    receipts = Receipt.objects.filter(
        company=company,
        customer=customer,
        receipt_date__gte=start,
        receipt_date__lte=end,
    ).select_related("invoice")
    for rec in receipts:
        lines.append(StatementLine(
            date=rec.receipt_date,
            kind="receipt",
            reference=rec.receipt_number,
            description=f"Payment - {rec.invoice.invoice_number}",
            credit=rec.amount,
        ))

    credits = CreditNote.objects.filter(
        company=company,
        customer=customer,
        status=CreditNote.Status.ISSUED,
        credit_note_date__gte=start,
        credit_note_date__lte=end,
    )
    for cn in credits:
        lines.append(StatementLine(
            date=cn.credit_note_date,
            kind="credit_note",
            reference=cn.credit_note_number,
            description=cn.reason or f"Credit note {cn.credit_note_number}",
            credit=cn.total_amount,
        ))

    opening = customer_balance_before(company, customer, start)
    return build_statement(start, end, opening, lines)
