# purchases/commands.py
"""
Command layer for purchasing.

Postings:
    send_purchase_order:  Dr Inventory subtotal / Dr VAT Input tax / Cr AP total
    record_bill:          Dr Expense subtotal / Dr VAT Input tax / Cr AP total
    pay_*:                Dr AP / Cr Bank
"""

import logging
from datetime import date
from typing import Optional

from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import money, to_decimal
from accounting.commands import adjust_bank_balance, next_document_number, record_transaction
from accounting.documents import price_line, totals_for, write_items
from accounting.models import Account, BankAccount, Transaction
from accounting.policies import can_use_bank_account
from accounting.resolution import bank_ledger_account, ensure_account, find_standard
from events.emitter import emit_event
from events.types import EventTypes
from tax.vat import company_vat_rate, effective_rate

from .models import Bill, BillItem, PurchaseOrder, PurchaseOrderItem, Supplier, SupplierPayment

logger = logging.getLogger(__name__)

PAYMENT_TOLERANCE = to_decimal("0.005")

SUPPLIER_FIELDS = ("name", "contact_person", "email", "phone", "address", "vat_number", "is_active")


def _resolve(company, role: str) -> Account:
    """Standard account for ``role``, else any account of its type, else created."""
    account = find_standard(company, role, fallback_to_type=True)
    return account or ensure_account(company, role)


def _payable(company) -> Account:
    return _resolve(company, "payable")


# =============================================================================
# Suppliers
# =============================================================================

@transaction.atomic
def create_supplier(actor: ActorContext, name: str, **fields) -> CommandResult:
    require(actor, "purchases.manage")

    name = (name or "").strip()
    if not name:
        return CommandResult.fail("Supplier name is required.")

    values = {k: v for k, v in fields.items() if k in SUPPLIER_FIELDS}
    supplier = Supplier.objects.create(company=actor.company, name=name, **values)

    event = emit_event(
        actor,
        EventTypes.SUPPLIER_CREATED,
        "Supplier",
        supplier.id,
        {"supplier_id": supplier.id, "name": name},
        idempotency_key=f"supplier.created:{supplier.id}",
    )
    return CommandResult.ok(supplier, event=event)


@transaction.atomic
def update_supplier(actor: ActorContext, supplier_id: int, **updates) -> CommandResult:
    require(actor, "purchases.manage")

    supplier = Supplier.objects.select_for_update().filter(pk=supplier_id, company=actor.company).first()
    if not supplier:
        return CommandResult.fail("Supplier not found.")

    changes = {
        field: {"old": getattr(supplier, field), "new": value}
        for field, value in updates.items()
        if field in SUPPLIER_FIELDS and getattr(supplier, field) != value
    }
    if "name" in changes and not (changes["name"]["new"] or "").strip():
        return CommandResult.fail("Supplier name is required.")
    if not changes:
        return CommandResult.ok(supplier)

    for field, change in changes.items():
        setattr(supplier, field, change["new"])
    supplier.save()

    event = emit_event(
        actor,
        EventTypes.SUPPLIER_UPDATED,
        "Supplier",
        supplier.id,
        {"supplier_id": supplier.id, "changes": changes},
    )
    return CommandResult.ok(supplier, event=event)


def build_lines(company, items: list):
    if not items:
        return None, "At least one line item is required."

    rate = company_vat_rate(company)
    lines = []
    for idx, item in enumerate(items, start=1):
        line, error = price_line(idx, item, rate)
        if error:
            return None, error
        lines.append(line)
    return lines, None


def _get_supplier(actor, supplier_id):
    return Supplier.objects.filter(pk=supplier_id, company=actor.company).first()


# =============================================================================
# Purchase orders
# =============================================================================

@transaction.atomic
def create_purchase_order(
    actor: ActorContext,
    supplier_id: int,
    order_date: date,
    items: list,
    due_date: Optional[date] = None,
    notes: str = "",
) -> CommandResult:
    require(actor, "purchases.manage")

    supplier = _get_supplier(actor, supplier_id)
    if not supplier:
        return CommandResult.fail("Supplier not found.")

    lines, error = build_lines(actor.company, items)
    if error:
        return CommandResult.fail(error)

    totals = totals_for(lines)
    po = PurchaseOrder.objects.create(
        company=actor.company,
        supplier=supplier,
        po_number=next_document_number(actor.company, "PO"),
        order_date=order_date,
        due_date=due_date,
        subtotal=totals.subtotal,
        tax_amount=totals.tax,
        total_amount=totals.total,
        notes=notes or "",
        created_by=actor.user,
    )
    write_items(PurchaseOrderItem, "purchase_order", po, lines)

    event = emit_event(
        actor,
        EventTypes.PURCHASE_ORDER_CREATED,
        "PurchaseOrder",
        po.id,
        {
            "purchase_order_id": po.id,
            "po_number": po.po_number,
            "supplier_id": supplier.id,
            "total_amount": totals.total,
        },
        idempotency_key=f"purchase_order.created:{po.id}",
    )
    return CommandResult.ok(po, event=event)


def _post_payable(actor, doc, number, supplier, debit_account, txn_type, txn_date):
    """Dr ``debit_account`` subtotal, Dr VAT Input tax, Cr AP total."""
    narration = f"{number} - {supplier.name}"
    lines = [
        {"account": debit_account, "debit": doc.subtotal, "description": narration},
        {"account": _payable(actor.company), "credit": doc.total_amount, "description": narration},
    ]
    if doc.tax_amount > 0:
        lines.append({
            "account": ensure_account(actor.company, "vat_input"),
            "debit": doc.tax_amount,
            "description": f"VAT on {number}",
        })

    return record_transaction(
        actor,
        txn_date=txn_date,
        description=narration,
        lines=lines,
        transaction_type=txn_type,
        reference=number,
        total_amount=doc.total_amount,
        vat_rate=effective_rate(doc.subtotal, doc.tax_amount),
        vat_amount=doc.tax_amount,
        base_amount=doc.subtotal,
        vat_inclusive=False,
        source=doc,
    )


@transaction.atomic
def send_purchase_order(actor: ActorContext, purchase_order_id: int, post_date: Optional[date] = None) -> CommandResult:
    """DRAFT -> SENT; the goods go to Inventory against Accounts Payable."""
    require(actor, "purchases.manage")

    po = (
        PurchaseOrder.objects.select_for_update()
        .select_related("supplier")
        .filter(pk=purchase_order_id, company=actor.company)
        .first()
    )
    if not po:
        return CommandResult.fail("Purchase order not found.")
    if po.status != PurchaseOrder.Status.DRAFT:
        return CommandResult.fail("Only DRAFT purchase orders can be sent.")
    if po.total_amount <= 0:
        return CommandResult.fail("Purchase order total must be greater than zero.")

    result = _post_payable(
        actor, po, po.po_number, po.supplier,
        _resolve(actor.company, "inventory"),
        Transaction.TransactionType.PURCHASE,
        post_date or po.order_date,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result
    txn = result.data

    po.status = PurchaseOrder.Status.SENT
    po.posted_transaction = txn
    po.save(update_fields=["status", "posted_transaction", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.PURCHASE_ORDER_SENT,
        "PurchaseOrder",
        po.id,
        {"purchase_order_id": po.id, "transaction_id": txn.id, "total_amount": po.total_amount},
        idempotency_key=f"purchase_order.sent:{po.id}",
    )
    return CommandResult.ok(po, event=event)


# =============================================================================
# Bills
# =============================================================================

@transaction.atomic
def create_bill(
    actor: ActorContext,
    supplier_id: int,
    bill_date: date,
    items: list,
    due_date: Optional[date] = None,
    supplier_reference: str = "",
    expense_account_id: Optional[int] = None,
    notes: str = "",
) -> CommandResult:
    require(actor, "purchases.manage")

    supplier = _get_supplier(actor, supplier_id)
    if not supplier:
        return CommandResult.fail("Supplier not found.")

    expense_account = None
    if expense_account_id:
        expense_account = Account.objects.filter(
            pk=expense_account_id,
            company=actor.company,
            account_type__in=[Account.AccountType.EXPENSE, Account.AccountType.ASSET],
        ).first()
        if not expense_account:
            return CommandResult.fail("Expense account must be an expense or asset account of this company.")

    lines, error = build_lines(actor.company, items)
    if error:
        return CommandResult.fail(error)

    totals = totals_for(lines)
    bill = Bill.objects.create(
        company=actor.company,
        supplier=supplier,
        bill_number=next_document_number(actor.company, "BILL"),
        supplier_reference=supplier_reference or "",
        bill_date=bill_date,
        due_date=due_date,
        expense_account=expense_account,
        subtotal=totals.subtotal,
        tax_amount=totals.tax,
        total_amount=totals.total,
        notes=notes or "",
        created_by=actor.user,
    )
    write_items(BillItem, "bill", bill, lines)

    event = emit_event(
        actor,
        EventTypes.BILL_CREATED,
        "Bill",
        bill.id,
        {
            "bill_id": bill.id,
            "bill_number": bill.bill_number,
            "supplier_id": supplier.id,
            "total_amount": totals.total,
        },
        idempotency_key=f"bill.created:{bill.id}",
    )
    return CommandResult.ok(bill, event=event)


@transaction.atomic
def record_bill(actor: ActorContext, bill_id: int, post_date: Optional[date] = None) -> CommandResult:
    """DRAFT -> RECORDED; posts the expense against Accounts Payable."""
    require(actor, "purchases.manage")

    bill = (
        Bill.objects.select_for_update()
        .select_related("supplier")
        .filter(pk=bill_id, company=actor.company)
        .first()
    )
    if not bill:
        return CommandResult.fail("Bill not found.")
    if bill.status != Bill.Status.DRAFT:
        return CommandResult.fail("Only DRAFT bills can be recorded.")
    if bill.total_amount <= 0:
        return CommandResult.fail("Bill total must be greater than zero.")

    expense_account = bill.expense_account or _resolve(actor.company, "operating_expense")
    result = _post_payable(
        actor, bill, bill.bill_number, bill.supplier,
        expense_account,
        Transaction.TransactionType.BILL,
        post_date or bill.bill_date,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result
    txn = result.data

    bill.status = Bill.Status.RECORDED
    bill.posted_transaction = txn
    bill.save(update_fields=["status", "posted_transaction", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.BILL_RECORDED,
        "Bill",
        bill.id,
        {"bill_id": bill.id, "transaction_id": txn.id, "expense_account": expense_account.code},
        idempotency_key=f"bill.recorded:{bill.id}",
    )
    return CommandResult.ok(bill, event=event)


# =============================================================================
# Payments
# =============================================================================

def _pay(actor, doc, number, amount, payment_date, bank_account_id, reference):
    """
    Shared payment flow for purchase orders and bills.

    Returns (CommandResult, payment). The result carries the failure when
    the payment is rejected.
    """
    if doc.status not in doc.OPEN_STATUSES:
        return CommandResult.fail(f"Cannot pay {number} with status {doc.status}."), None

    amount = money(amount)
    if amount <= 0:
        return CommandResult.fail("Payment amount must be greater than zero."), None
    if amount - doc.balance_due > PAYMENT_TOLERANCE:
        return CommandResult.fail(
            f"Payment of {amount} exceeds the outstanding balance of {doc.balance_due}."
        ), None

    bank_account = BankAccount.objects.filter(pk=bank_account_id).first()
    allowed, reason = can_use_bank_account(actor, bank_account)
    if not allowed:
        return CommandResult.fail(reason), None

    narration = f"Payment {number} - {doc.supplier.name}"
    result = record_transaction(
        actor,
        txn_date=payment_date,
        description=narration,
        lines=[
            {"account": _payable(actor.company), "debit": amount},
            {"account": bank_ledger_account(bank_account), "credit": amount},
        ],
        transaction_type=Transaction.TransactionType.PAYMENT,
        reference=reference or number,
        total_amount=amount,
        bank_account=bank_account,
        source=doc,
    )
    if not result.success:
        return result, None
    txn = result.data

    adjust_bank_balance(bank_account, amount, "subtract")

    payment = SupplierPayment.objects.create(
        company=actor.company,
        supplier=doc.supplier,
        purchase_order=doc if isinstance(doc, PurchaseOrder) else None,
        bill=doc if isinstance(doc, Bill) else None,
        payment_number=next_document_number(actor.company, "PAY"),
        payment_date=payment_date,
        amount=amount,
        bank_account=bank_account,
        transaction=txn,
        reference=reference or "",
    )

    doc.amount_paid = money(doc.amount_paid + amount)
    if doc.balance_due <= PAYMENT_TOLERANCE:
        doc.status = doc.Status.PAID
    else:
        doc.status = doc.Status.PARTIALLY_PAID
    doc.save(update_fields=["amount_paid", "status", "updated_at"])

    logger.info(
        "Supplier payment recorded",
        extra={"company_id": actor.company.id, "document": number, "transaction_id": txn.id},
    )
    return CommandResult.ok({"document": doc, "payment": payment}), payment


@transaction.atomic
def pay_purchase_order(
    actor: ActorContext,
    purchase_order_id: int,
    amount,
    payment_date: date,
    bank_account_id: int,
    reference: str = "",
) -> CommandResult:
    require(actor, "purchases.pay")

    po = (
        PurchaseOrder.objects.select_for_update()
        .select_related("supplier")
        .filter(pk=purchase_order_id, company=actor.company)
        .first()
    )
    if not po:
        return CommandResult.fail("Purchase order not found.")

    result, payment = _pay(actor, po, po.po_number, amount, payment_date, bank_account_id, reference)
    if not result.success:
        transaction.set_rollback(True)
        return result

    result.event = emit_event(
        actor,
        EventTypes.PURCHASE_ORDER_PAID,
        "PurchaseOrder",
        po.id,
        {
            "purchase_order_id": po.id,
            "payment_id": payment.id,
            "amount": payment.amount,
            "transaction_id": payment.transaction_id,
            "status": po.status,
        },
        idempotency_key=f"purchase_order.paid:{payment.id}",
    )
    return result


@transaction.atomic
def pay_bill(
    actor: ActorContext,
    bill_id: int,
    amount,
    payment_date: date,
    bank_account_id: int,
    reference: str = "",
) -> CommandResult:
    require(actor, "purchases.pay")

    bill = (
        Bill.objects.select_for_update()
        .select_related("supplier")
        .filter(pk=bill_id, company=actor.company)
        .first()
    )
    if not bill:
        return CommandResult.fail("Bill not found.")

    result, payment = _pay(actor, bill, bill.bill_number, amount, payment_date, bank_account_id, reference)
    if not result.success:
        transaction.set_rollback(True)
        return result

    result.event = emit_event(
        actor,
        EventTypes.BILL_PAID,
        "Bill",
        bill.id,
        {
            "bill_id": bill.id,
            "payment_id": payment.id,
            "amount": payment.amount,
            "transaction_id": payment.transaction_id,
            "status": bill.status,
        },
        idempotency_key=f"bill.paid:{payment.id}",
    )
    return result
