# sales/commands.py
"""
Command layer for sales documents.

Invoice lifecycle:
    DRAFT --send--> SENT --payments--> PARTIALLY_PAID --> PAID
    DRAFT --cancel--> CANCELLED
    SENT (nothing paid) --cancel--> CANCELLED  (posting reversed)

Issued credit notes against an invoice add to its amount_credited, which
reduces the balance due; their running total cannot exceed the invoice total.

Postings (all through accounting.commands.record_transaction):
    send_invoice:        Dr AR total / Cr Revenue subtotal / Cr VAT Output tax
                         plus Dr COGS / Cr Inventory for product lines
    record payment:      Dr Bank / Cr AR
    issue_credit_note:   Dr Revenue subtotal / Dr VAT Output tax / Cr AR total
"""

import logging
from datetime import date
from typing import Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import ZERO, money, to_decimal
from accounting.commands import (
    adjust_bank_balance,
    next_document_number,
    record_transaction,
    reverse_posted,
)
from accounting.documents import price_line, totals_for, write_items
from accounting.models import BankAccount, Transaction
from accounting.policies import can_use_bank_account
from accounting.resolution import bank_ledger_account, ensure_account, find_standard
from events.emitter import emit_event
from events.types import EventTypes
from tax.vat import company_vat_rate, effective_rate

from .models import (
    CreditNote,
    CreditNoteItem,
    Customer,
    Invoice,
    InvoiceItem,
    Product,
    Quote,
    QuoteItem,
    Receipt,
)

logger = logging.getLogger(__name__)

# Overpayment slack when comparing against a balance due.
PAYMENT_TOLERANCE = to_decimal("0.005")


# =============================================================================
# Customers & Products
# =============================================================================

CUSTOMER_FIELDS = ("name", "email", "phone", "address", "vat_number", "notes", "is_active")


@transaction.atomic
def create_customer(actor: ActorContext, name: str, **fields) -> CommandResult:
    require(actor, "sales.manage")

    name = (name or "").strip()
    if not name:
        return CommandResult.fail("Customer name is required.")

    values = {k: v for k, v in fields.items() if k in CUSTOMER_FIELDS}
    customer = Customer.objects.create(company=actor.company, name=name, **values)

    event = emit_event(
        actor,
        EventTypes.CUSTOMER_CREATED,
        "Customer",
        customer.id,
        {"customer_id": customer.id, "name": name, "email": customer.email},
        idempotency_key=f"customer.created:{customer.id}",
    )
    return CommandResult.ok(customer, event=event)


@transaction.atomic
def update_customer(actor: ActorContext, customer_id: int, **updates) -> CommandResult:
    require(actor, "sales.manage")

    customer = Customer.objects.select_for_update().filter(pk=customer_id, company=actor.company).first()
    if not customer:
        return CommandResult.fail("Customer not found.")

    changes = {}
    for field, new_value in updates.items():
        if field not in CUSTOMER_FIELDS:
            continue
        old_value = getattr(customer, field)
        if old_value != new_value:
            changes[field] = {"old": old_value, "new": new_value}

    if "name" in changes and not (changes["name"]["new"] or "").strip():
        return CommandResult.fail("Customer name is required.")

    if not changes:
        return CommandResult.ok(customer)

    for field, change in changes.items():
        setattr(customer, field, change["new"])
    customer.save()

    event = emit_event(
        actor,
        EventTypes.CUSTOMER_UPDATED,
        "Customer",
        customer.id,
        {"customer_id": customer.id, "changes": changes},
    )
    return CommandResult.ok(customer, event=event)


@transaction.atomic
def create_product(
    actor: ActorContext,
    name: str,
    unit_price,
    item_type: str = Product.ItemType.PRODUCT,
    cost_price=None,
    description: str = "",
) -> CommandResult:
    require(actor, "sales.manage")

    name = (name or "").strip()
    if not name:
        return CommandResult.fail("Product name is required.")
    if item_type not in Product.ItemType.values:
        return CommandResult.fail(f"Invalid item type: {item_type}")

    price = money(unit_price)
    if price < 0:
        return CommandResult.fail("Unit price cannot be negative.")
    cost = money(cost_price) if cost_price not in (None, "") else None
    if cost is not None and cost < 0:
        return CommandResult.fail("Cost price cannot be negative.")

    product = Product.objects.create(
        company=actor.company,
        name=name,
        description=description,
        item_type=item_type,
        unit_price=price,
        cost_price=cost,
    )

    event = emit_event(
        actor,
        EventTypes.PRODUCT_CREATED,
        "Product",
        product.id,
        {"product_id": product.id, "name": name, "item_type": item_type, "unit_price": price},
        idempotency_key=f"product.created:{product.id}",
    )
    return CommandResult.ok(product, event=event)


@transaction.atomic
def update_product(actor: ActorContext, product_id: int, **updates) -> CommandResult:
    require(actor, "sales.manage")

    product = Product.objects.select_for_update().filter(pk=product_id, company=actor.company).first()
    if not product:
        return CommandResult.fail("Product not found.")

    allowed = {"name", "description", "item_type", "unit_price", "cost_price", "is_active"}
    changes = {}
    for field, new_value in updates.items():
        if field not in allowed:
            continue
        if field in ("unit_price", "cost_price") and new_value is not None:
            new_value = money(new_value)
        old_value = getattr(product, field)
        if old_value != new_value:
            changes[field] = {"old": old_value, "new": new_value}

    if "item_type" in changes and changes["item_type"]["new"] not in Product.ItemType.values:
        return CommandResult.fail(f"Invalid item type: {changes['item_type']['new']}")

    if not changes:
        return CommandResult.ok(product)

    for field, change in changes.items():
        setattr(product, field, change["new"])
    product.save()

    event = emit_event(
        actor,
        EventTypes.PRODUCT_UPDATED,
        "Product",
        product.id,
        {"product_id": product.id, "changes": changes},
    )
    return CommandResult.ok(product, event=event)


# =============================================================================
# Line building
# =============================================================================

def build_lines(company, items: list, default_rate=None):
    """
    Price raw item dicts; items may reference a product by ``product_id``.
    A missing rate falls back to the company VAT rate.

    Returns (lines, error).
    """
    if not items:
        return None, "At least one line item is required."

    rate = company_vat_rate(company) if default_rate is None else default_rate
    lines = []
    for idx, item in enumerate(items, start=1):
        product = None
        if item.get("product_id"):
            product = Product.objects.filter(pk=item["product_id"], company=company).first()
            if not product:
                return None, f"Line {idx}: product not found."

        line, error = price_line(idx, item, rate, product=product)
        if error:
            return None, error
        line["product"] = product
        lines.append(line)
    return lines, None


def _get_customer(actor, customer_id):
    return Customer.objects.filter(pk=customer_id, company=actor.company).first()


# =============================================================================
# Invoices
# =============================================================================

def _create_invoice(actor, customer, invoice_date, due_date, lines, notes=""):
    totals = totals_for(lines)
    invoice = Invoice.objects.create(
        company=actor.company,
        customer=customer,
        invoice_number=next_document_number(actor.company, "INV"),
        invoice_date=invoice_date,
        due_date=due_date,
        subtotal=totals.subtotal,
        tax_amount=totals.tax,
        total_amount=totals.total,
        notes=notes or "",
        created_by=actor.user,
    )
    write_items(InvoiceItem, "invoice", invoice, lines)

    event = emit_event(
        actor,
        EventTypes.INVOICE_CREATED,
        "Invoice",
        invoice.id,
        {
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "customer_id": customer.id,
            "invoice_date": invoice_date,
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax,
            "total_amount": totals.total,
        },
        idempotency_key=f"invoice.created:{invoice.id}",
    )
    return invoice, event


@transaction.atomic
def create_invoice(
    actor: ActorContext,
    customer_id: int,
    invoice_date: date,
    items: list,
    due_date: Optional[date] = None,
    notes: str = "",
) -> CommandResult:
    """Create a DRAFT invoice numbered from the company sequence."""
    require(actor, "sales.manage")

    customer = _get_customer(actor, customer_id)
    if not customer:
        return CommandResult.fail("Customer not found.")
    if due_date and due_date < invoice_date:
        return CommandResult.fail("Due date cannot be before the invoice date.")

    lines, error = build_lines(actor.company, items)
    if error:
        return CommandResult.fail(error)

    invoice, event = _create_invoice(actor, customer, invoice_date, due_date, lines, notes)
    return CommandResult.ok(invoice, event=event)


@transaction.atomic
def update_invoice(actor: ActorContext, invoice_id: int, **updates) -> CommandResult:
    """Edit a DRAFT invoice. ``items`` replaces all lines."""
    require(actor, "sales.manage")

    invoice = Invoice.objects.select_for_update().filter(pk=invoice_id, company=actor.company).first()
    if not invoice:
        return CommandResult.fail("Invoice not found.")
    if invoice.status != Invoice.Status.DRAFT:
        return CommandResult.fail("Only DRAFT invoices can be edited.")

    if "customer_id" in updates and updates["customer_id"] is not None:
        customer = _get_customer(actor, updates["customer_id"])
        if not customer:
            return CommandResult.fail("Customer not found.")
        invoice.customer = customer

    for field in ("invoice_date", "due_date", "notes"):
        if field in updates:
            setattr(invoice, field, updates[field])

    if invoice.due_date and invoice.due_date < invoice.invoice_date:
        return CommandResult.fail("Due date cannot be before the invoice date.")

    if updates.get("items") is not None:
        lines, error = build_lines(actor.company, updates["items"])
        if error:
            return CommandResult.fail(error)
        invoice.items.all().delete()
        write_items(InvoiceItem, "invoice", invoice, lines)
        totals = totals_for(lines)
        invoice.subtotal = totals.subtotal
        invoice.tax_amount = totals.tax
        invoice.total_amount = totals.total

    invoice.save()

    event = emit_event(
        actor,
        EventTypes.INVOICE_UPDATED,
        "Invoice",
        invoice.id,
        {"invoice_id": invoice.id, "total_amount": invoice.total_amount},
    )
    return CommandResult.ok(invoice, event=event)


@transaction.atomic
def send_invoice(actor: ActorContext, invoice_id: int, post_date: Optional[date] = None) -> CommandResult:
    """
    Mark a DRAFT invoice SENT and post it to the ledger.

    Product lines also move their cost from Inventory to Cost of Sales,
    valued at the product cost price (unit price when none is set).
    """
    require(actor, "sales.manage")

    invoice = (
        Invoice.objects.select_for_update()
        .select_related("customer")
        .filter(pk=invoice_id, company=actor.company)
        .first()
    )
    if not invoice:
        return CommandResult.fail("Invoice not found.")
    if invoice.status != Invoice.Status.DRAFT:
        return CommandResult.fail("Only DRAFT invoices can be sent.")
    if invoice.total_amount <= 0:
        return CommandResult.fail("Invoice total must be greater than zero.")

    company = actor.company
    receivable = find_standard(company, "receivable")
    revenue = find_standard(company, "revenue")
    if not receivable or not revenue:
        return CommandResult.fail("Core accounts missing: AR or Revenue")

    narration = f"Invoice {invoice.invoice_number} - {invoice.customer.name}"
    lines = [
        {"account": receivable, "debit": invoice.total_amount, "description": narration},
        {"account": revenue, "credit": invoice.subtotal, "description": narration},
    ]
    if invoice.tax_amount > 0:
        lines.append({
            "account": ensure_account(company, "vat_output"),
            "credit": invoice.tax_amount,
            "description": f"VAT on {invoice.invoice_number}",
        })

    cost_of_sales = ZERO
    for item in invoice.items.select_related("product"):
        if item.product is None or not item.product.is_stock_item:
            continue
        unit_cost = item.product.cost_price if item.product.cost_price is not None else item.unit_price
        cost_of_sales += money(item.quantity * unit_cost)
    if cost_of_sales > 0:
        lines.append({"account": ensure_account(company, "cogs"), "debit": cost_of_sales, "description": narration})
        lines.append({"account": ensure_account(company, "inventory"), "credit": cost_of_sales, "description": narration})

    result = record_transaction(
        actor,
        txn_date=post_date or invoice.invoice_date,
        description=narration,
        lines=lines,
        transaction_type=Transaction.TransactionType.SALES,
        reference=invoice.invoice_number,
        total_amount=invoice.total_amount,
        vat_rate=effective_rate(invoice.subtotal, invoice.tax_amount),
        vat_amount=invoice.tax_amount,
        base_amount=invoice.subtotal,
        vat_inclusive=False,
        source=invoice,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result
    txn = result.data

    invoice.status = Invoice.Status.SENT
    invoice.posted_transaction = txn
    invoice.sent_at = timezone.now()
    invoice.save(update_fields=["status", "posted_transaction", "sent_at", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.INVOICE_SENT,
        "Invoice",
        invoice.id,
        {
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "transaction_id": txn.id,
            "total_amount": invoice.total_amount,
            "cost_of_sales": cost_of_sales,
        },
        idempotency_key=f"invoice.sent:{invoice.id}",
    )
    logger.info("Invoice sent", extra={"company_id": company.id, "invoice_id": invoice.id, "transaction_id": txn.id})
    return CommandResult.ok(invoice, event=event)


@transaction.atomic
def record_invoice_payment(
    actor: ActorContext,
    invoice_id: int,
    amount,
    payment_date: date,
    bank_account_id: int,
    reference: str = "",
) -> CommandResult:
    """Receive money against an open invoice: Dr Bank / Cr AR."""
    require(actor, "sales.receive_payment")

    invoice = (
        Invoice.objects.select_for_update()
        .select_related("customer")
        .filter(pk=invoice_id, company=actor.company)
        .first()
    )
    if not invoice:
        return CommandResult.fail("Invoice not found.")
    if invoice.status not in Invoice.OPEN_STATUSES:
        return CommandResult.fail("Payments can only be recorded against sent invoices.")

    amount = money(amount)
    if amount <= 0:
        return CommandResult.fail("Payment amount must be greater than zero.")
    if amount - invoice.balance_due > PAYMENT_TOLERANCE:
        return CommandResult.fail(
            f"Payment of {amount} exceeds the outstanding balance of {invoice.balance_due}."
        )

    bank_account = BankAccount.objects.filter(pk=bank_account_id).first()
    allowed, reason = can_use_bank_account(actor, bank_account)
    if not allowed:
        return CommandResult.fail(reason)

    receivable = find_standard(actor.company, "receivable")
    if not receivable:
        return CommandResult.fail("Core accounts missing: AR or Revenue")

    narration = f"Payment for {invoice.invoice_number} - {invoice.customer.name}"
    result = record_transaction(
        actor,
        txn_date=payment_date,
        description=narration,
        lines=[
            {"account": bank_ledger_account(bank_account), "debit": amount},
            {"account": receivable, "credit": amount},
        ],
        transaction_type=Transaction.TransactionType.RECEIPT,
        reference=reference or invoice.invoice_number,
        total_amount=amount,
        bank_account=bank_account,
        source=invoice,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result
    txn = result.data

    adjust_bank_balance(bank_account, amount, "add")

    receipt = Receipt.objects.create(
        company=actor.company,
        customer=invoice.customer,
        invoice=invoice,
        receipt_number=next_document_number(actor.company, "RCT"),
        receipt_date=payment_date,
        amount=amount,
        bank_account=bank_account,
        transaction=txn,
        reference=reference or "",
    )

    invoice.amount_paid = money(invoice.amount_paid + amount)
    if invoice.balance_due <= PAYMENT_TOLERANCE:
        invoice.status = Invoice.Status.PAID
    else:
        invoice.status = Invoice.Status.PARTIALLY_PAID
    invoice.save(update_fields=["amount_paid", "status", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.INVOICE_PAYMENT_RECORDED,
        "Invoice",
        invoice.id,
        {
            "invoice_id": invoice.id,
            "receipt_id": receipt.id,
            "amount": amount,
            "transaction_id": txn.id,
            "status": invoice.status,
            "bank_account_id": bank_account.id,
        },
        idempotency_key=f"invoice.payment_recorded:{receipt.id}",
    )
    return CommandResult.ok({"invoice": invoice, "receipt": receipt}, event=event)


@transaction.atomic
def cancel_invoice(actor: ActorContext, invoice_id: int, reason: str = "") -> CommandResult:
    require(actor, "sales.manage")

    invoice = Invoice.objects.select_for_update().filter(pk=invoice_id, company=actor.company).first()
    if not invoice:
        return CommandResult.fail("Invoice not found.")

    previous_status = invoice.status
    if previous_status == Invoice.Status.SENT:
        if invoice.amount_paid > 0:
            return CommandResult.fail("Cannot cancel an invoice that has payments.")
        if invoice.amount_credited > 0:
            return CommandResult.fail("Cannot cancel an invoice that has issued credit notes.")
        if invoice.posted_transaction_id:
            result = reverse_posted(actor, invoice.posted_transaction, reason=reason or "Invoice cancelled")
            if not result.success:
                transaction.set_rollback(True)
                return result
    elif previous_status != Invoice.Status.DRAFT:
        return CommandResult.fail(f"Cannot cancel an invoice with status {previous_status}.")

    invoice.status = Invoice.Status.CANCELLED
    invoice.save(update_fields=["status", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.INVOICE_CANCELLED,
        "Invoice",
        invoice.id,
        {"invoice_id": invoice.id, "previous_status": previous_status, "reason": reason},
        idempotency_key=f"invoice.cancelled:{invoice.id}",
    )
    return CommandResult.ok(invoice, event=event)


# =============================================================================
# Quotes
# =============================================================================

@transaction.atomic
def create_quote(
    actor: ActorContext,
    customer_id: int,
    quote_date: date,
    items: list,
    expiry_date: Optional[date] = None,
    notes: str = "",
) -> CommandResult:
    require(actor, "sales.manage")

    customer = _get_customer(actor, customer_id)
    if not customer:
        return CommandResult.fail("Customer not found.")

    lines, error = build_lines(actor.company, items)
    if error:
        return CommandResult.fail(error)

    totals = totals_for(lines)
    quote = Quote.objects.create(
        company=actor.company,
        customer=customer,
        quote_number=next_document_number(actor.company, "QUO"),
        quote_date=quote_date,
        expiry_date=expiry_date,
        subtotal=totals.subtotal,
        tax_amount=totals.tax,
        total_amount=totals.total,
        notes=notes or "",
        created_by=actor.user,
    )
    write_items(QuoteItem, "quote", quote, lines)

    event = emit_event(
        actor,
        EventTypes.QUOTE_CREATED,
        "Quote",
        quote.id,
        {
            "quote_id": quote.id,
            "quote_number": quote.quote_number,
            "customer_id": customer.id,
            "total_amount": totals.total,
        },
        idempotency_key=f"quote.created:{quote.id}",
    )
    return CommandResult.ok(quote, event=event)


@transaction.atomic
def convert_quote_to_invoice(
    actor: ActorContext,
    quote_id: int,
    invoice_date: Optional[date] = None,
    due_date: Optional[date] = None,
) -> CommandResult:
    """Copy a quote's lines onto a new DRAFT invoice and mark it CONVERTED."""
    require(actor, "sales.manage")

    quote = Quote.objects.select_for_update().select_related("customer").filter(
        pk=quote_id, company=actor.company,
    ).first()
    if not quote:
        return CommandResult.fail("Quote not found.")
    if quote.status in (Quote.Status.CONVERTED, Quote.Status.DECLINED):
        return CommandResult.fail(f"Cannot convert a quote with status {quote.status}.")

    lines = [
        {
            "line_no": item.line_no,
            "product": item.product,
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "tax_rate": item.tax_rate,
            "amount": item.amount,
            "tax_amount": item.tax_amount,
        }
        for item in quote.items.all()
    ]
    if not lines:
        return CommandResult.fail("Quote has no line items.")

    invoice, _ = _create_invoice(
        actor,
        quote.customer,
        invoice_date or date.today(),
        due_date,
        lines,
        notes=quote.notes,
    )

    quote.status = Quote.Status.CONVERTED
    quote.converted_invoice = invoice
    quote.save(update_fields=["status", "converted_invoice", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.QUOTE_CONVERTED,
        "Quote",
        quote.id,
        {"quote_id": quote.id, "invoice_id": invoice.id, "invoice_number": invoice.invoice_number},
        idempotency_key=f"quote.converted:{quote.id}",
    )
    return CommandResult.ok(invoice, event=event)


@transaction.atomic
def decline_quote(actor: ActorContext, quote_id: int) -> CommandResult:
    require(actor, "sales.manage")

    quote = Quote.objects.select_for_update().filter(pk=quote_id, company=actor.company).first()
    if not quote:
        return CommandResult.fail("Quote not found.")
    if quote.status == Quote.Status.CONVERTED:
        return CommandResult.fail("A converted quote cannot be declined.")
    if quote.status == Quote.Status.DECLINED:
        return CommandResult.ok(quote)

    quote.status = Quote.Status.DECLINED
    quote.save(update_fields=["status", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.QUOTE_DECLINED,
        "Quote",
        quote.id,
        {"quote_id": quote.id},
        idempotency_key=f"quote.declined:{quote.id}",
    )
    return CommandResult.ok(quote, event=event)


# =============================================================================
# Credit notes
# =============================================================================

def _credited_against(invoice):
    """Total of the invoice's credit notes that are not cancelled."""
    qs = CreditNote.objects.filter(invoice=invoice).exclude(status=CreditNote.Status.CANCELLED)
    return qs.aggregate(total=Sum("total_amount"))["total"] or ZERO


@transaction.atomic
def create_credit_note(
    actor: ActorContext,
    customer_id: int,
    credit_note_date: date,
    items: list,
    invoice_id: Optional[int] = None,
    reason: str = "",
) -> CommandResult:
    require(actor, "sales.manage")

    customer = _get_customer(actor, customer_id)
    if not customer:
        return CommandResult.fail("Customer not found.")

    invoice = None
    if invoice_id:
        invoice = Invoice.objects.filter(pk=invoice_id, company=actor.company).first()
        if not invoice:
            return CommandResult.fail("Invoice not found.")
        if invoice.customer_id != customer.id:
            return CommandResult.fail("Invoice belongs to a different customer.")

    lines, error = build_lines(actor.company, items)
    if error:
        return CommandResult.fail(error)

    totals = totals_for(lines)
    if invoice is not None and _credited_against(invoice) + totals.total > invoice.total_amount:
        return CommandResult.fail("Credit notes cannot exceed the invoice total.")

    credit_note = CreditNote.objects.create(
        company=actor.company,
        customer=customer,
        invoice=invoice,
        credit_note_number=next_document_number(actor.company, "CN"),
        credit_note_date=credit_note_date,
        reason=reason or "",
        subtotal=totals.subtotal,
        tax_amount=totals.tax,
        total_amount=totals.total,
        created_by=actor.user,
    )
    write_items(CreditNoteItem, "credit_note", credit_note, lines)

    event = emit_event(
        actor,
        EventTypes.CREDIT_NOTE_CREATED,
        "CreditNote",
        credit_note.id,
        {
            "credit_note_id": credit_note.id,
            "credit_note_number": credit_note.credit_note_number,
            "customer_id": customer.id,
            "invoice_id": invoice.id if invoice else None,
            "total_amount": totals.total,
        },
        idempotency_key=f"credit_note.created:{credit_note.id}",
    )
    return CommandResult.ok(credit_note, event=event)


@transaction.atomic
def issue_credit_note(actor: ActorContext, credit_note_id: int, post_date: Optional[date] = None) -> CommandResult:
    """DRAFT -> ISSUED; Dr Revenue / Dr VAT Output / Cr AR."""
    require(actor, "sales.manage")

    credit_note = (
        CreditNote.objects.select_for_update()
        .select_related("customer")
        .filter(pk=credit_note_id, company=actor.company)
        .first()
    )
    if not credit_note:
        return CommandResult.fail("Credit note not found.")
    if credit_note.status != CreditNote.Status.DRAFT:
        return CommandResult.fail("Only DRAFT credit notes can be issued.")
    if credit_note.total_amount <= 0:
        return CommandResult.fail("Credit note total must be greater than zero.")

    invoice = None
    if credit_note.invoice_id:
        invoice = Invoice.objects.select_for_update().get(pk=credit_note.invoice_id)
        if invoice.status in (Invoice.Status.DRAFT, Invoice.Status.CANCELLED):
            return CommandResult.fail(f"Cannot credit an invoice with status {invoice.status}.")
        if invoice.amount_credited + credit_note.total_amount > invoice.total_amount:
            return CommandResult.fail("Credit notes cannot exceed the invoice total.")

    company = actor.company
    receivable = find_standard(company, "receivable")
    revenue = find_standard(company, "revenue")
    if not receivable or not revenue:
        return CommandResult.fail("Core accounts missing: AR or Revenue")

    narration = f"Credit note {credit_note.credit_note_number} - {credit_note.customer.name}"
    lines = [
        {"account": revenue, "debit": credit_note.subtotal, "description": narration},
        {"account": receivable, "credit": credit_note.total_amount, "description": narration},
    ]
    if credit_note.tax_amount > 0:
        lines.append({
            "account": ensure_account(company, "vat_output"),
            "debit": credit_note.tax_amount,
            "description": f"VAT on {credit_note.credit_note_number}",
        })

    result = record_transaction(
        actor,
        txn_date=post_date or credit_note.credit_note_date,
        description=narration,
        lines=lines,
        transaction_type=Transaction.TransactionType.CREDIT_NOTE,
        reference=credit_note.credit_note_number,
        total_amount=credit_note.total_amount,
        vat_rate=effective_rate(credit_note.subtotal, credit_note.tax_amount),
        vat_amount=credit_note.tax_amount,
        base_amount=credit_note.subtotal,
        source=credit_note,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result
    txn = result.data

    credit_note.status = CreditNote.Status.ISSUED
    credit_note.posted_transaction = txn
    credit_note.save(update_fields=["status", "posted_transaction", "updated_at"])

    if invoice is not None:
        invoice.amount_credited = money(invoice.amount_credited + credit_note.total_amount)
        invoice.save(update_fields=["amount_credited", "updated_at"])

    event = emit_event(
        actor,
        EventTypes.CREDIT_NOTE_ISSUED,
        "CreditNote",
        credit_note.id,
        {
            "credit_note_id": credit_note.id,
            "transaction_id": txn.id,
            "total_amount": credit_note.total_amount,
        },
        idempotency_key=f"credit_note.issued:{credit_note.id}",
    )
    return CommandResult.ok(credit_note, event=event)
