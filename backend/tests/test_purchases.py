# tests/test_purchases.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.balances import account_totals
from accounting.models import Account, Transaction
from purchases.commands import (
    create_bill,
    create_purchase_order,
    create_supplier,
    pay_bill,
    pay_purchase_order,
    record_bill,
    send_purchase_order,
)
from purchases.models import Bill, PurchaseOrder
from purchases.statements import supplier_statement

STATIONERY = [{"description": "Stationery", "quantity": 1, "unit_price": "2000.00"}]
STOCK = [{"description": "Widgets", "quantity": 10, "unit_price": "100.00"}]


@pytest.fixture
def supplier(actor):
    result = create_supplier(actor, "Office Supplies (Pty) Ltd")
    assert result.success, result.error
    return result.data


@pytest.fixture
def recorded_bill(actor, supplier):
    bill = create_bill(actor, supplier.id, date(2025, 5, 2), STATIONERY, supplier_reference="OS-991").data
    result = record_bill(actor, bill.id)
    assert result.success, result.error
    return result.data


@pytest.mark.django_db
class TestBills:
    def test_create_totals_and_numbering(self, actor, supplier):
        bill = create_bill(actor, supplier.id, date(2025, 5, 2), STATIONERY).data

        assert bill.bill_number == "BILL-000001"
        assert bill.status == Bill.Status.DRAFT
        assert bill.total_amount == Decimal("2300.00")

    def test_record_posts_expense_input_vat_and_payable(self, actor, recorded_bill, account):
        assert recorded_bill.status == Bill.Status.RECORDED
        assert recorded_bill.posted_transaction.transaction_type == Transaction.TransactionType.BILL

        totals = account_totals(actor.company)
        assert totals[account("6000").id].debit == Decimal("2000.00")
        assert totals[account("2110").id].debit == Decimal("300.00")
        assert totals[account("2000").id].credit == Decimal("2300.00")

    def test_custom_expense_account_must_be_expense_or_asset(self, actor, supplier, account):
        revenue = account("4000")
        assert not create_bill(
            actor, supplier.id, date(2025, 5, 2), STATIONERY, expense_account_id=revenue.id,
        ).success

        expense = Account.objects.filter(
            company=actor.company, account_type=Account.AccountType.EXPENSE,
        ).exclude(code="6000").first()
        bill = create_bill(
            actor, supplier.id, date(2025, 5, 2), STATIONERY, expense_account_id=expense.id,
        ).data
        record_bill(actor, bill.id)

        assert account_totals(actor.company)[expense.id].debit == Decimal("2000.00")

    def test_bill_is_recorded_once(self, actor, recorded_bill):
        assert not record_bill(actor, recorded_bill.id).success

    def test_payment_reduces_bank_and_settles(self, actor, recorded_bill, bank_account):
        result = pay_bill(actor, recorded_bill.id, "2300.00", date(2025, 5, 20), bank_account.id)

        assert result.success, result.error
        assert result.data["document"].status == Bill.Status.PAID
        assert result.data["payment"].payment_number == "PAY-000001"
        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("7700.00")

    def test_overpayment_is_rejected(self, actor, recorded_bill, bank_account):
        result = pay_bill(actor, recorded_bill.id, "2300.50", date(2025, 5, 20), bank_account.id)
        assert not result.success
        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("10000.00")


@pytest.mark.django_db
class TestPurchaseOrders:
    def test_send_debits_inventory(self, actor, supplier, account):
        po = create_purchase_order(actor, supplier.id, date(2025, 5, 1), STOCK).data
        assert po.po_number == "PO-000001"

        result = send_purchase_order(actor, po.id)

        assert result.success, result.error
        assert result.data.status == PurchaseOrder.Status.SENT
        totals = account_totals(actor.company)
        assert totals[account("1300").id].debit == Decimal("1000.00")
        assert totals[account("2000").id].credit == Decimal("1150.00")

    def test_draft_order_cannot_be_paid(self, actor, supplier, bank_account):
        po = create_purchase_order(actor, supplier.id, date(2025, 5, 1), STOCK).data
        assert not pay_purchase_order(actor, po.id, "100.00", date(2025, 5, 3), bank_account.id).success

    def test_partial_payment(self, actor, supplier, bank_account):
        po = create_purchase_order(actor, supplier.id, date(2025, 5, 1), STOCK).data
        send_purchase_order(actor, po.id)

        result = pay_purchase_order(actor, po.id, "150.00", date(2025, 5, 3), bank_account.id)

        assert result.success, result.error
        po = result.data["document"]
        assert po.status == PurchaseOrder.Status.PARTIALLY_PAID
        assert po.balance_due == Decimal("1000.00")


@pytest.mark.django_db
def test_supplier_statement(actor, supplier, recorded_bill, bank_account):
    earlier = create_bill(actor, supplier.id, date(2025, 4, 28), STATIONERY).data
    record_bill(actor, earlier.id)
    pay_bill(actor, recorded_bill.id, "1000.00", date(2025, 5, 20), bank_account.id)

    statement = supplier_statement(actor.company, supplier, date(2025, 5, 1), date(2025, 5, 31))

    assert statement.opening_balance == Decimal("2300.00")
    assert [line.kind for line in statement.lines] == ["bill", "payment"]
    assert statement.closing_balance == Decimal("3600.00")
