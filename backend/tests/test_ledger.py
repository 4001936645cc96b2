# tests/test_ledger.py
from datetime import date
from decimal import Decimal

import pytest

from accounting.balances import account_totals
from accounting.commands import next_document_number, post_journal, reverse_transaction
from accounting.models import Transaction
from events.models import BusinessEvent
from events.types import EventTypes


def _journal(actor, account, amount="250.00", txn_date=date(2025, 4, 1)):
    return post_journal(
        actor,
        txn_date,
        "Owner contribution",
        [
            {"account_id": account("1100").id, "debit": Decimal(amount)},
            {"account_id": account("3000").id, "credit": Decimal(amount)},
        ],
    )


@pytest.mark.django_db
class TestPostJournal:
    def test_balanced_journal_posts_entries(self, actor, account):
        result = _journal(actor, account)

        assert result.success, result.error
        txn = result.data
        assert txn.status == Transaction.Status.POSTED
        assert txn.entries.count() == 2
        assert txn.total_amount == Decimal("250.00")
        assert BusinessEvent.objects.filter(
            company=actor.company, event_type=EventTypes.TRANSACTION_POSTED, aggregate_id=str(txn.id),
        ).exists()

    def test_unbalanced_journal_is_rejected(self, actor, account):
        result = post_journal(
            actor,
            date(2025, 4, 1),
            "Out of balance",
            [
                {"account_id": account("1100").id, "debit": Decimal("100.00")},
                {"account_id": account("3000").id, "credit": Decimal("99.00")},
            ],
        )

        assert not result.success
        assert not Transaction.objects.filter(company=actor.company).exists()

    def test_sub_cent_amounts_round_before_balance_check(self, actor, account):
        result = post_journal(
            actor,
            date(2025, 4, 1),
            "Rounding",
            [
                {"account_id": account("1100").id, "debit": Decimal("100.004")},
                {"account_id": account("3000").id, "credit": Decimal("100.00")},
            ],
        )
        assert result.success, result.error

    def test_single_line_is_rejected(self, actor, account):
        result = post_journal(
            actor, date(2025, 4, 1), "One line", [{"account_id": account("1100").id, "debit": 10}],
        )
        assert not result.success

    def test_line_with_both_sides_is_rejected(self, actor, account):
        result = post_journal(
            actor,
            date(2025, 4, 1),
            "Both sides",
            [
                {"account_id": account("1100").id, "debit": 10, "credit": 10},
                {"account_id": account("3000").id, "credit": 10},
            ],
        )
        assert not result.success

    def test_inactive_account_is_rejected(self, actor, account):
        bank = account("1100")
        bank.is_active = False
        bank.save()

        assert not _journal(actor, account).success


@pytest.mark.django_db
class TestReversal:
    def test_reversal_mirrors_entries_and_nets_to_zero(self, actor, account):
        original = _journal(actor, account).data

        result = reverse_transaction(actor, original.id, date(2025, 4, 2), "Posted in error")

        assert result.success, result.error
        original.refresh_from_db()
        assert original.status == Transaction.Status.REVERSED
        reversal = result.data["reversal"]
        assert reversal.reverses_id == original.id
        assert reversal.transaction_type == Transaction.TransactionType.REVERSAL

        totals = account_totals(actor.company)
        bank = totals[account("1100").id]
        assert bank.debit == bank.credit == Decimal("250.00")

    def test_cannot_reverse_twice(self, actor, account):
        original = _journal(actor, account).data
        assert reverse_transaction(actor, original.id, None, "").success

        assert not reverse_transaction(actor, original.id, None, "").success


@pytest.mark.django_db
def test_document_numbers_are_sequential_per_prefix(company):
    assert next_document_number(company, "INV") == "INV-000001"
    assert next_document_number(company, "INV") == "INV-000002"
    assert next_document_number(company, "QUO") == "QUO-000001"
