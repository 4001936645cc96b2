# tests/test_vat.py
from decimal import Decimal

from accounting.models import Transaction
from tax.vat import (
    CREDIT,
    INPUT,
    OUTPUT,
    classify,
    company_vat_rate,
    document_totals,
    effective_rate,
    line_totals,
    split_amount,
    transaction_net,
    transaction_vat,
)


class TestSplitAmount:
    def test_inclusive(self):
        split = split_amount(Decimal("115.00"), 15, inclusive=True)
        assert split.net == Decimal("100.00")
        assert split.vat == Decimal("15.00")
        assert split.gross == Decimal("115.00")

    def test_exclusive(self):
        split = split_amount(Decimal("200.00"), 15, inclusive=False)
        assert split == (Decimal("200.00"), Decimal("30.00"), Decimal("230.00"))

    def test_zero_rate_has_no_vat(self):
        split = split_amount("99.99", 0)
        assert split == (Decimal("99.99"), Decimal("0.00"), Decimal("99.99"))

    def test_parts_always_add_up(self):
        split = split_amount(Decimal("100.00"), 15)
        assert split.net + split.vat == split.gross


class TestDocumentTotals:
    def test_line_totals_round_half_up(self):
        totals = line_totals(Decimal("3"), Decimal("33.33"), 15)
        assert totals.amount == Decimal("99.99")
        assert totals.tax == Decimal("15.00")
        assert totals.total == Decimal("114.99")

    def test_document_totals_sum_lines(self):
        totals = document_totals([line_totals(2, "500.00", 15), line_totals(1, "100.00", 0)])
        assert totals.subtotal == Decimal("1100.00")
        assert totals.tax == Decimal("150.00")
        assert totals.total == Decimal("1250.00")

    def test_effective_rate(self):
        assert effective_rate(Decimal("1000"), Decimal("150")) == Decimal("15.00")
        assert effective_rate(0, 10) == Decimal("0.00")


class TestClassification:
    def test_output_input_and_credit(self):
        T = Transaction.TransactionType
        assert classify(T.SALES) == OUTPUT
        assert classify(T.INCOME) == OUTPUT
        assert classify(T.BILL) == INPUT
        assert classify(T.EXPENSE) == INPUT
        assert classify(T.CREDIT_NOTE) == CREDIT
        assert classify(T.JOURNAL) is None


class TestTransactionVat:
    def test_stored_amount_wins(self):
        txn = Transaction(total_amount=Decimal("115"), vat_amount=Decimal("15"), vat_rate=Decimal("50"))
        assert transaction_vat(txn) == Decimal("15.00")

    def test_derived_from_inclusive_total(self):
        txn = Transaction(total_amount=Decimal("230"), vat_amount=0, vat_rate=Decimal("15"), vat_inclusive=True)
        assert transaction_vat(txn) == Decimal("30.00")
        assert transaction_net(txn) == Decimal("200.00")

    def test_zero_base_falls_back_to_rate(self):
        txn = Transaction(
            total_amount=Decimal("230"),
            vat_amount=0,
            vat_rate=Decimal("15"),
            vat_inclusive=True,
            base_amount=Decimal("0"),
        )
        assert transaction_vat(txn) == Decimal("30.00")
        assert transaction_net(txn) == Decimal("200.00")

    def test_exclusive_without_base_has_no_vat(self):
        txn = Transaction(total_amount=Decimal("230"), vat_amount=0, vat_rate=Decimal("15"), vat_inclusive=False)
        assert transaction_vat(txn) == Decimal("0.00")


def test_unregistered_company_charges_no_vat(company):
    company.vat_registered = False
    assert company_vat_rate(company) == Decimal("0")
    company.vat_registered = True
    assert company_vat_rate(company) == Decimal("15.00")
