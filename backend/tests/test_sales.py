# tests/test_sales.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.balances import account_totals
from accounting.models import Transaction
from sales.commands import (
    cancel_invoice,
    convert_quote_to_invoice,
    create_credit_note,
    create_customer,
    create_invoice,
    create_product,
    create_quote,
    decline_quote,
    issue_credit_note,
    record_invoice_payment,
    send_invoice,
    update_invoice,
)
from sales.models import CreditNote, Invoice, Quote
from sales.statements import customer_statement

CONSULTING = [{"description": "Consulting", "quantity": 2, "unit_price": "500.00"}]


@pytest.fixture
def customer(actor):
    result = create_customer(actor, "Acme Holdings", email="accounts@acme.test")
    assert result.success, result.error
    return result.data


@pytest.fixture
def sent_invoice(actor, customer):
    invoice = create_invoice(actor, customer.id, date(2025, 4, 10), CONSULTING).data
    result = send_invoice(actor, invoice.id)
    assert result.success, result.error
    return result.data


@pytest.mark.django_db
class TestInvoices:
    def test_create_prices_lines_with_company_vat(self, actor, customer):
        result = create_invoice(actor, customer.id, date(2025, 4, 10), CONSULTING)

        assert result.success, result.error
        invoice = result.data
        assert invoice.status == Invoice.Status.DRAFT
        assert invoice.invoice_number == "INV-000001"
        assert invoice.subtotal == Decimal("1000.00")
        assert invoice.tax_amount == Decimal("150.00")
        assert invoice.total_amount == Decimal("1150.00")
        assert invoice.items.count() == 1

    def test_create_requires_items(self, actor, customer):
        assert not create_invoice(actor, customer.id, date(2025, 4, 10), []).success

    def test_send_posts_receivable_revenue_and_output_vat(self, actor, sent_invoice, account):
        assert sent_invoice.status == Invoice.Status.SENT
        txn = sent_invoice.posted_transaction
        assert txn.transaction_type == Transaction.TransactionType.SALES
        assert txn.vat_amount == Decimal("150.00")

        totals = account_totals(actor.company)
        assert totals[account("1200").id].debit == Decimal("1150.00")
        assert totals[account("4000").id].credit == Decimal("1000.00")
        assert totals[account("2200").id].credit == Decimal("150.00")

    def test_stock_lines_move_cost_to_cost_of_sales(self, actor, customer, account):
        product = create_product(actor, "Widget", "200.00", cost_price="120.00").data
        invoice = create_invoice(
            actor, customer.id, date(2025, 4, 10), [{"product_id": product.id, "quantity": 3}],
        ).data
        assert invoice.subtotal == Decimal("600.00")

        assert send_invoice(actor, invoice.id).success

        totals = account_totals(actor.company)
        assert totals[account("5000").id].debit == Decimal("360.00")
        assert totals[account("1300").id].credit == Decimal("360.00")

    def test_only_drafts_can_be_edited_or_sent(self, actor, sent_invoice):
        assert not send_invoice(actor, sent_invoice.id).success
        assert not update_invoice(actor, sent_invoice.id, notes="late edit").success

    def test_update_replaces_lines(self, actor, customer):
        invoice = create_invoice(actor, customer.id, date(2025, 4, 10), CONSULTING).data

        result = update_invoice(
            actor, invoice.id, items=[{"description": "Audit", "quantity": 1, "unit_price": "100.00"}],
        )

        assert result.success, result.error
        invoice.refresh_from_db()
        assert invoice.total_amount == Decimal("115.00")
        assert list(invoice.items.values_list("description", flat=True)) == ["Audit"]


@pytest.mark.django_db
class TestPayments:
    def test_partial_then_full_payment(self, actor, sent_invoice, bank_account):
        first = record_invoice_payment(actor, sent_invoice.id, "500.00", date(2025, 4, 20), bank_account.id)

        assert first.success, first.error
        invoice = first.data["invoice"]
        assert invoice.status == Invoice.Status.PARTIALLY_PAID
        assert invoice.balance_due == Decimal("650.00")
        assert first.data["receipt"].receipt_number == "RCT-000001"
        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("10500.00")

        second = record_invoice_payment(actor, sent_invoice.id, "650.00", date(2025, 4, 25), bank_account.id)
        assert second.success, second.error
        assert second.data["invoice"].status == Invoice.Status.PAID

    def test_overpayment_is_rejected(self, actor, sent_invoice, bank_account):
        result = record_invoice_payment(actor, sent_invoice.id, "1200.00", date(2025, 4, 20), bank_account.id)

        assert not result.success
        assert "exceeds" in result.error

    def test_draft_invoice_cannot_be_paid(self, actor, customer, bank_account):
        invoice = create_invoice(actor, customer.id, date(2025, 4, 10), CONSULTING).data
        assert not record_invoice_payment(actor, invoice.id, "10.00", date(2025, 4, 20), bank_account.id).success


@pytest.mark.django_db
class TestCancellation:
    def test_cancelling_sent_invoice_reverses_posting(self, actor, sent_invoice):
        txn_id = sent_invoice.posted_transaction_id

        result = cancel_invoice(actor, sent_invoice.id, reason="Duplicate")

        assert result.success, result.error
        assert result.data.status == Invoice.Status.CANCELLED
        assert Transaction.objects.get(pk=txn_id).status == Transaction.Status.REVERSED

    def test_paid_invoice_cannot_be_cancelled(self, actor, sent_invoice, bank_account):
        record_invoice_payment(actor, sent_invoice.id, "100.00", date(2025, 4, 20), bank_account.id)
        assert not cancel_invoice(actor, sent_invoice.id).success


@pytest.mark.django_db
class TestQuotesAndCreditNotes:
    def test_quote_converts_once(self, actor, customer):
        quote = create_quote(actor, customer.id, date(2025, 4, 1), CONSULTING).data
        assert quote.quote_number == "QUO-000001"

        result = convert_quote_to_invoice(actor, quote.id, invoice_date=date(2025, 4, 5))

        assert result.success, result.error
        invoice = result.data
        assert invoice.status == Invoice.Status.DRAFT
        assert invoice.total_amount == quote.total_amount
        quote.refresh_from_db()
        assert quote.status == Quote.Status.CONVERTED
        assert quote.converted_invoice_id == invoice.id
        assert not convert_quote_to_invoice(actor, quote.id).success

    def test_declined_quote_cannot_convert(self, actor, customer):
        quote = create_quote(actor, customer.id, date(2025, 4, 1), CONSULTING).data
        assert decline_quote(actor, quote.id).success
        assert not convert_quote_to_invoice(actor, quote.id).success

    def test_credit_note_reverses_revenue_and_vat(self, actor, customer, sent_invoice, account):
        note = create_credit_note(
            actor,
            customer.id,
            date(2025, 4, 12),
            [{"description": "Discount", "quantity": 1, "unit_price": "100.00"}],
            invoice_id=sent_invoice.id,
        ).data
        assert note.total_amount == Decimal("115.00")

        result = issue_credit_note(actor, note.id)

        assert result.success, result.error
        assert result.data.status == CreditNote.Status.ISSUED
        totals = account_totals(actor.company)
        assert totals[account("1200").id].credit == Decimal("115.00")
        assert totals[account("2200").id].debit == Decimal("15.00")

    def test_credit_note_cannot_exceed_invoice(self, actor, customer, sent_invoice):
        result = create_credit_note(
            actor,
            customer.id,
            date(2025, 4, 12),
            [{"description": "Too much", "quantity": 1, "unit_price": "5000.00"}],
            invoice_id=sent_invoice.id,
        )
        assert not result.success

    def test_credit_notes_are_capped_cumulatively(self, actor, customer, sent_invoice, bank_account, account):
        partial = [{"description": "Returned", "quantity": 1, "unit_price": "800.00"}]
        first = create_credit_note(actor, customer.id, date(2025, 4, 12), partial, invoice_id=sent_invoice.id).data
        assert issue_credit_note(actor, first.id).success

        second = create_credit_note(actor, customer.id, date(2025, 4, 13), partial, invoice_id=sent_invoice.id)
        assert not second.success
        assert "exceed" in second.error

        sent_invoice.refresh_from_db()
        assert sent_invoice.amount_credited == Decimal("920.00")
        assert sent_invoice.balance_due == Decimal("230.00")

        overpaid = record_invoice_payment(actor, sent_invoice.id, "1150.00", date(2025, 4, 20), bank_account.id)
        assert not overpaid.success
        assert "exceeds" in overpaid.error

        result = record_invoice_payment(actor, sent_invoice.id, "230.00", date(2025, 4, 20), bank_account.id)
        assert result.success, result.error
        assert result.data["invoice"].status == Invoice.Status.PAID

        totals = account_totals(actor.company)
        receivable = totals[account("1200").id]
        assert receivable.debit - receivable.credit == Decimal("0.00")

    def test_credited_invoice_cannot_be_cancelled(self, actor, customer, sent_invoice):
        note = create_credit_note(
            actor,
            customer.id,
            date(2025, 4, 12),
            [{"description": "Discount", "quantity": 1, "unit_price": "100.00"}],
            invoice_id=sent_invoice.id,
        ).data
        issue_credit_note(actor, note.id)

        result = cancel_invoice(actor, sent_invoice.id)

        assert not result.success
        assert "credit" in result.error


@pytest.mark.django_db
class TestCustomerStatement:
    def test_running_balance_and_same_day_order(self, actor, customer, sent_invoice, bank_account):
        note = create_credit_note(
            actor,
            customer.id,
            date(2025, 4, 10),
            [{"description": "Discount", "quantity": 1, "unit_price": "100.00"}],
        ).data
        issue_credit_note(actor, note.id)
        record_invoice_payment(actor, sent_invoice.id, "500.00", date(2025, 4, 20), bank_account.id)

        statement = customer_statement(actor.company, customer, date(2025, 4, 1), date(2025, 4, 30))

        assert statement.opening_balance == Decimal("0.00")
        assert [line.kind for line in statement.lines] == ["invoice", "credit_note", "receipt"]
        assert [line.balance for line in statement.lines] == [
            Decimal("1150.00"), Decimal("1035.00"), Decimal("535.00"),
        ]
        assert statement.closing_balance == Decimal("535.00")

    def test_earlier_invoices_form_opening_balance(self, actor, customer):
        invoice = create_invoice(actor, customer.id, date(2025, 3, 15), CONSULTING).data
        send_invoice(actor, invoice.id)
        create_invoice(actor, customer.id, date(2025, 3, 20), CONSULTING)  # draft, ignored

        statement = customer_statement(actor.company, customer, date(2025, 4, 1), date(2025, 4, 30))

        assert statement.opening_balance == Decimal("1150.00")
        assert statement.lines == []
        assert statement.closing_balance == Decimal("1150.00")
