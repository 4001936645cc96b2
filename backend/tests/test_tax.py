# tests/test_tax.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.commands import post_journal, reverse_transaction
from accounting.models import Transaction
from accounting.resolution import bank_ledger_account
from purchases.commands import create_bill, create_supplier, record_bill
from sales.commands import (
    cancel_invoice,
    create_credit_note,
    create_customer,
    create_invoice,
    issue_credit_note,
    send_invoice,
)
from tax.income_tax import compute_income_tax
from tax.paye import DEFAULT_TAX_CONFIG, annual_bracket_tax, calculate_paye, period_days
from tax.returns import PAYABLE, RECEIVABLE, annual_vat_report, purchase_vat_report, vat201, vat_position

BRACKETS = DEFAULT_TAX_CONFIG["brackets"]


class TestIncomeTax:
    def test_adjustments_and_deferred_tax(self):
        result = compute_income_tax(1000000, 50000, 20000, 10000, 4000, 27)

        assert result.net_permanent == Decimal("30000.00")
        assert result.net_temporary == Decimal("6000.00")
        assert result.adjusted_taxable_income == Decimal("1036000.00")
        assert result.current_tax == Decimal("279720.00")
        assert result.deferred_tax == Decimal("1620.00")
        assert result.total_tax == Decimal("281340.00")

    def test_loss_has_no_current_tax(self):
        result = compute_income_tax(-100000)

        assert result.taxable_income == Decimal("0.00")
        assert result.current_tax == Decimal("0.00")
        assert result.total_tax == Decimal("0.00")


class TestPaye:
    def test_bracket_boundaries(self):
        assert annual_bracket_tax(Decimal("237100"), BRACKETS) == Decimal("42678.00")
        assert annual_bracket_tax(Decimal("300000"), BRACKETS) == Decimal("59032.00")
        assert annual_bracket_tax(Decimal("2000000"), BRACKETS) == Decimal("772983.00")

    def test_full_tax_year(self):
        result = calculate_paye(300000, date(2024, 3, 1), date(2025, 2, 28))

        assert result.period_days == 365
        assert result.annual_tax == Decimal("59032.00")
        assert result.paye == Decimal("41797.00")
        assert result.uif_employee == Decimal("177.12")
        assert result.uif_employer == Decimal("177.12")
        assert result.sdl == Decimal("3000.00")

    def test_monthly_period_is_annualised(self):
        result = calculate_paye(30000, date(2025, 6, 1), date(2025, 6, 30))

        assert result.annual_taxable == Decimal("365000.00")
        assert result.annual_tax == Decimal("75932.00")
        assert result.paye == Decimal("4824.38")
        assert result.sdl == Decimal("300.00")

    def test_rebate_floors_at_zero(self):
        result = calculate_paye(5000, date(2025, 6, 1), date(2025, 6, 30))
        assert result.paye == Decimal("0.00")
        assert result.uif_employee == Decimal("50.00")

    def test_reversed_period_counts_one_day(self):
        assert period_days(date(2025, 6, 30), date(2025, 6, 1)) == 1


def test_vat_position():
    assert vat_position(Decimal("1")) == RECEIVABLE
    assert vat_position(Decimal("-1")) == PAYABLE
    assert vat_position(Decimal("0")) == "Neutral"


@pytest.fixture
def vat_activity(actor):
    """April: sale with 150 output VAT and a bill with 300 input VAT. May: 15 VAT credit note."""
    customer = create_customer(actor, "Acme Holdings").data
    supplier = create_supplier(actor, "Office Supplies").data

    invoice = create_invoice(
        actor, customer.id, date(2025, 4, 10), [{"description": "Consulting", "quantity": 2, "unit_price": "500.00"}],
    ).data
    send_invoice(actor, invoice.id)

    bill = create_bill(
        actor, supplier.id, date(2025, 4, 12), [{"description": "Printer", "quantity": 1, "unit_price": "2000.00"}],
    ).data
    record_bill(actor, bill.id)

    note = create_credit_note(
        actor, customer.id, date(2025, 5, 5), [{"description": "Discount", "quantity": 1, "unit_price": "100.00"}],
    ).data
    issue_credit_note(actor, note.id)
    return {"customer": customer, "invoice": invoice}


@pytest.mark.django_db
class TestVatReturns:
    def test_vat201_rows_newest_first(self, company, vat_activity):
        rows = vat201(company)

        assert [row["period"] for row in rows] == ["May 2025", "April 2025"]
        may, april = rows
        assert april["vat_output"] == Decimal("150.00")
        assert april["vat_input"] == Decimal("300.00")
        assert april["net"] == Decimal("150.00")
        assert april["position"] == RECEIVABLE
        assert may["vat_output"] == Decimal("-15.00")
        assert may["details"][0]["type"] == "Credit Note"

    def test_vat201_respects_range(self, company, vat_activity):
        rows = vat201(company, start=date(2025, 5, 1), end=date(2025, 5, 31))
        assert [row["month"] for row in rows] == [5]

    def test_cancelled_invoice_drops_out(self, actor, company, vat_activity):
        cancel_invoice(actor, vat_activity["invoice"].id)

        april = [row for row in vat201(company) if row["month"] == 4][0]
        assert april["vat_output"] == Decimal("0.00")
        assert april["vat_input"] == Decimal("300.00")

    def test_annual_report_covers_every_month(self, company, vat_activity):
        report = annual_vat_report(company, 2025)

        assert len(report["months"]) == 12
        assert report["months"][0]["vat_output"] == Decimal("0.00")
        assert report["totals"]["vat_output"] == Decimal("135.00")
        assert report["totals"]["vat_input"] == Decimal("300.00")
        assert report["totals"]["net"] == Decimal("165.00")
        assert report["totals"]["position"] == RECEIVABLE

    def test_purchase_report(self, company, vat_activity):
        report = purchase_vat_report(company, date(2025, 4, 1), date(2025, 4, 30))

        assert len(report["rows"]) == 1
        assert report["rows"][0]["purchases_excl_vat"] == Decimal("2000.00")
        assert report["totals"]["vat_input"] == Decimal("300.00")


@pytest.mark.django_db
class TestManualVatJournals:
    def _expense(self, actor, bank_account, account, **overrides):
        fields = {
            "transaction_type": Transaction.TransactionType.EXPENSE,
            "vat_rate": "15",
            "vat_amount": "30.00",
            "base_amount": "200.00",
            "vat_inclusive": True,
            "bank_account_id": bank_account.id,
        }
        fields.update(overrides)
        return post_journal(
            actor,
            date(2025, 6, 3),
            "Stationery",
            [
                {"account_id": account("6000").id, "debit": "200.00"},
                {"account_id": account("2110").id, "debit": "30.00"},
                {"account_id": bank_ledger_account(bank_account).id, "credit": "230.00"},
            ],
            **fields,
        )

    def test_expense_journal_reports_input_vat(self, actor, company, bank_account, account):
        result = self._expense(actor, bank_account, account)
        assert result.success, result.error

        rows = vat201(company, start=date(2025, 6, 1), end=date(2025, 6, 30))
        assert len(rows) == 1
        assert rows[0]["vat_input"] == Decimal("30.00")
        assert rows[0]["details"][0]["type"] == "Input VAT"

        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("9770.00")

    def test_rate_only_journal_derives_vat(self, actor, company, bank_account, account):
        result = self._expense(actor, bank_account, account, vat_amount="0", base_amount=None)
        assert result.success, result.error

        rows = vat201(company, start=date(2025, 6, 1), end=date(2025, 6, 30))
        assert rows[0]["vat_input"] == Decimal("30.00")

    def test_reversal_restores_bank_balance(self, actor, bank_account, account):
        txn = self._expense(actor, bank_account, account).data
        assert reverse_transaction(actor, txn.id).success

        bank_account.refresh_from_db()
        assert bank_account.current_balance == Decimal("10000.00")

    def test_bank_account_must_be_on_the_lines(self, actor, bank_account, account):
        result = post_journal(
            actor,
            date(2025, 6, 3),
            "Accrual",
            [
                {"account_id": account("6000").id, "debit": "100.00"},
                {"account_id": account("2000").id, "credit": "100.00"},
            ],
            bank_account_id=bank_account.id,
        )
        assert not result.success
        assert Transaction.objects.filter(description="Accrual").count() == 0

    def test_rejects_out_of_range_rate(self, actor, bank_account, account):
        assert not self._expense(actor, bank_account, account, vat_rate="120").success
