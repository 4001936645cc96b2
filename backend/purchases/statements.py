# purchases/statements.py
"""
Supplier statements.

Purchase orders and bills increase what is owed (debits on the statement),
payments reduce it. Opening balance = documents before the start minus
payments before the start.
"""

from datetime import date

from django.db.models import Sum

from accounting.amounts import ZERO, money
from accounting.statements import Statement, StatementLine, build_statement

from .models import Bill, PurchaseOrder, SupplierPayment


def _total(qs, field: str):
    return qs.aggregate(total=Sum(field))["total"] or ZERO


def _orders(company, supplier):
    return PurchaseOrder.objects.filter(
        company=company,
        supplier=supplier,
        status__in=PurchaseOrder.POSTED_STATUSES,
    )


def _bills(company, supplier):
    return Bill.objects.filter(company=company, supplier=supplier, status__in=Bill.POSTED_STATUSES)


def supplier_balance_before(company, supplier, start: date):
    documents = (
        _total(_orders(company, supplier).filter(order_date__lt=start), "total_amount")
        + _total(_bills(company, supplier).filter(bill_date__lt=start), "total_amount")
    )
    payments = _total(
        SupplierPayment.objects.filter(company=company, supplier=supplier, payment_date__lt=start),
        "amount",
    )
    return money(documents - payments)


def supplier_statement(company, supplier, start: date, end: date) -> Statement:
    lines = []

    for po in _orders(company, supplier).filter(order_date__gte=start, order_date__lte=end):
        lines.append(StatementLine(
            date=po.order_date,
            kind="purchase_order",
            reference=po.po_number,
            description=f"Purchase order {po.po_number}",
            debit=po.total_amount,
        ))

    for bill in _bills(company, supplier).filter(bill_date__gte=start, bill_date__lte=end):
        lines.append(StatementLine(
            date=bill.bill_date,
            kind="bill",
            reference=bill.bill_number,
            description=f"Bill {bill.supplier_reference or bill.bill_number}",
            debit=bill.total_amount,
        ))

    payments = SupplierPayment.objects.filter(
        company=company,
        supplier=supplier,
        payment_date__gte=start,
        payment_date__lte=end,
    ).select_related("purchase_order", "bill")
    for payment in payments:
        lines.append(StatementLine(
            date=payment.payment_date,
            kind="payment",
            reference=payment.payment_number,
            description=f"Payment - {payment.document_number}",
            credit=payment.amount,
        ))

    opening = supplier_balance_before(company, supplier, start)
    return build_statement(start, end, opening, lines)
