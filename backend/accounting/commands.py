# accounting/commands.py
"""
Command layer for ledger operations.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and emit audit events.

Pattern:
1. Validate permissions (require)
2. Apply business policies (can_*)
3. Perform the operation (model changes)
4. Emit event (emit_event)
5. Return CommandResult

The sales, purchases and assets commands post through
``record_transaction`` so every ledger write is validated the same way.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import ZERO, money, to_decimal
from accounting.models import Account, BankAccount, CompanySequence, LedgerEntry, Transaction
from accounting.resolution import bank_ledger_account
from accounting.policies import (
    can_change_account_type,
    can_delete_account,
    can_post_to_account,
    can_reverse_transaction,
    can_use_bank_account,
    check_balanced,
)
from events.emitter import emit_event
from events.types import EventTypes

logger = logging.getLogger(__name__)


def next_company_sequence(company, name: str) -> int:
    """
    Allocate the next sequence value for a company/name pair.
    Uses select_for_update to avoid concurrent duplicates.
    """
    try:
        seq = CompanySequence.objects.select_for_update().get(
            company=company,
            name=name,
        )
    except CompanySequence.DoesNotExist:
        try:
            with transaction.atomic():
                seq = CompanySequence.objects.create(
                    company=company,
                    name=name,
                    next_value=1,
                )
        except IntegrityError:
            seq = CompanySequence.objects.select_for_update().get(
                company=company,
                name=name,
            )

    value = seq.next_value
    seq.next_value = value + 1
    seq.save(update_fields=["next_value"])
    return value


def next_document_number(company, prefix: str) -> str:
    """e.g. ``INV-000001``; one counter per prefix."""
    value = next_company_sequence(company, f"document:{prefix}")
    return f"{prefix}-{value:06d}"


# =============================================================================
# Account Commands
# =============================================================================

@transaction.atomic
def create_account(
    actor: ActorContext,
    code: str,
    name: str,
    account_type: str,
    description: str = "",
) -> CommandResult:
    """Create a new account in the chart of accounts."""
    require(actor, "accounts.manage")

    code = (code or "").strip()
    name = (name or "").strip()
    if not code or not name:
        return CommandResult.fail("Account code and name are required.")

    if account_type not in Account.AccountType.values:
        return CommandResult.fail(f"Invalid account type: {account_type}")

    if Account.objects.filter(company=actor.company, code=code).exists():
        return CommandResult.fail(f"Account code '{code}' already exists.")

    account = Account.objects.create(
        company=actor.company,
        code=code,
        name=name,
        account_type=account_type,
        description=description,
    )

    event = emit_event(
        actor,
        EventTypes.ACCOUNT_CREATED,
        "Account",
        account.id,
        {
            "account_id": account.id,
            "code": code,
            "name": name,
            "account_type": account_type,
            "normal_balance": account.normal_balance,
        },
        idempotency_key=f"account.created:{account.id}",
    )
    return CommandResult.ok(account, event=event)


@transaction.atomic
def update_account(actor: ActorContext, account_id: int, **updates) -> CommandResult:
    """Update name, code, type, description or active flag."""
    require(actor, "accounts.manage")

    try:
        account = Account.objects.select_for_update().get(pk=account_id, company=actor.company)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.")

    allowed_fields = {"code", "name", "account_type", "description", "is_active"}
    changes = {}
    for field, new_value in updates.items():
        if field not in allowed_fields:
            continue
        old_value = getattr(account, field)
        if old_value != new_value:
            changes[field] = {"old": old_value, "new": new_value}

    if not changes:
        return CommandResult.ok(account)

    if "account_type" in changes:
        if changes["account_type"]["new"] not in Account.AccountType.values:
            return CommandResult.fail(f"Invalid account type: {changes['account_type']['new']}")
        allowed, reason = can_change_account_type(actor, account)
        if not allowed:
            return CommandResult.fail(reason)

    if "code" in changes:
        new_code = (changes["code"]["new"] or "").strip()
        if not new_code:
            return CommandResult.fail("Account code is required.")
        if Account.objects.filter(company=actor.company, code=new_code).exclude(pk=account.pk).exists():
            return CommandResult.fail(f"Account code '{new_code}' already exists.")

    for field, change in changes.items():
        setattr(account, field, change["new"])
    account.save()

    event = emit_event(
        actor,
        EventTypes.ACCOUNT_UPDATED,
        "Account",
        account.id,
        {"account_id": account.id, "changes": changes},
    )
    return CommandResult.ok(account, event=event)


@transaction.atomic
def delete_account(actor: ActorContext, account_id: int) -> CommandResult:
    require(actor, "accounts.manage")

    try:
        account = Account.objects.get(pk=account_id, company=actor.company)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.")

    allowed, reason = can_delete_account(actor, account)
    if not allowed:
        return CommandResult.fail(reason)

    code = account.code
    account.delete()

    event = emit_event(
        actor,
        EventTypes.ACCOUNT_DELETED,
        "Account",
        account_id,
        {"account_id": account_id, "code": code},
        idempotency_key=f"account.deleted:{account_id}",
    )
    return CommandResult.ok({"account_id": account_id}, event=event)


# =============================================================================
# Bank Accounts
# =============================================================================

@transaction.atomic
def create_bank_account(
    actor: ActorContext,
    name: str,
    bank_name: str = "",
    account_number: str = "",
    opening_balance=ZERO,
    ledger_account_id: Optional[int] = None,
) -> CommandResult:
    require(actor, "banking.manage")

    if not (name or "").strip():
        return CommandResult.fail("Bank account name is required.")

    ledger_account = None
    if ledger_account_id:
        ledger_account = Account.objects.filter(
            pk=ledger_account_id,
            company=actor.company,
            account_type=Account.AccountType.ASSET,
        ).first()
        if not ledger_account:
            return CommandResult.fail("Ledger account must be an asset account of this company.")

    opening = money(opening_balance)
    bank_account = BankAccount.objects.create(
        company=actor.company,
        name=name.strip(),
        bank_name=bank_name,
        account_number=account_number,
        ledger_account=ledger_account,
        opening_balance=opening,
        current_balance=opening,
    )

    event = emit_event(
        actor,
        EventTypes.BANK_ACCOUNT_CREATED,
        "BankAccount",
        bank_account.id,
        {"bank_account_id": bank_account.id, "name": bank_account.name, "opening_balance": opening},
        idempotency_key=f"bank_account.created:{bank_account.id}",
    )
    return CommandResult.ok(bank_account, event=event)


def adjust_bank_balance(bank_account: BankAccount, amount, operation: str) -> BankAccount:
    """Add to or subtract from a bank account's running balance."""
    amount = money(amount)
    if operation == "add":
        delta = amount
    elif operation == "subtract":
        delta = -amount
    else:
        raise ValueError(f"Unknown bank balance operation: {operation}")

    BankAccount.objects.filter(pk=bank_account.pk).update(
        current_balance=F("current_balance") + delta
    )
    bank_account.refresh_from_db(fields=["current_balance"])
    return bank_account


# =============================================================================
# Posting
# =============================================================================

def _resolve_line_account(company, line: dict) -> Optional[Account]:
    account = line.get("account")
    if account is not None:
        return account if account.company_id == company.id else None
    account_id = line.get("account_id")
    if not account_id:
        return None
    return Account.objects.filter(pk=account_id, company=company).first()


def record_transaction(
    actor: ActorContext,
    *,
    txn_date: date,
    description: str,
    lines: list,
    transaction_type: str = Transaction.TransactionType.JOURNAL,
    reference: str = "",
    total_amount=None,
    vat_rate=ZERO,
    vat_amount=ZERO,
    base_amount=None,
    vat_inclusive: bool = False,
    bank_account: Optional[BankAccount] = None,
    source=None,
    reverses: Optional[Transaction] = None,
    event_key: Optional[str] = None,
) -> CommandResult:
    """
    Validate and write a POSTED transaction with its ledger entries.

    Each line is a dict with ``account`` (an Account) or ``account_id``,
    plus ``debit`` / ``credit`` and an optional ``description``. Zero
    lines are dropped. Callers are responsible for permissions; this runs
    inside the caller's atomic block.
    """
    if transaction_type not in Transaction.TransactionType.values:
        return CommandResult.fail(f"Invalid transaction type: {transaction_type}")

    prepared = []
    for idx, line in enumerate(lines, start=1):
        debit = money(line.get("debit"))
        credit = money(line.get("credit"))
        if debit < 0 or credit < 0:
            return CommandResult.fail(f"Line {idx}: amounts cannot be negative.")
        if debit > 0 and credit > 0:
            return CommandResult.fail(f"Line {idx}: a line cannot have both debit and credit.")
        if debit == 0 and credit == 0:
            continue

        account = _resolve_line_account(actor.company, line)
        if account is None:
            return CommandResult.fail(f"Line {idx}: account not found.")
        allowed, reason = can_post_to_account(account)
        if not allowed:
            return CommandResult.fail(reason)

        prepared.append((account, debit, credit, line.get("description", "")))

    if len(prepared) < 2:
        return CommandResult.fail("A transaction needs at least two non-zero lines.")

    total_debit = sum((p[1] for p in prepared), ZERO)
    total_credit = sum((p[2] for p in prepared), ZERO)
    allowed, reason = check_balanced(total_debit, total_credit)
    if not allowed:
        return CommandResult.fail(reason)

    txn = Transaction.objects.create(
        company=actor.company,
        date=txn_date,
        description=description or "",
        reference=reference or "",
        transaction_type=transaction_type,
        status=Transaction.Status.POSTED,
        total_amount=money(total_amount) if total_amount is not None else total_debit,
        vat_rate=to_decimal(vat_rate),
        vat_amount=money(vat_amount),
        base_amount=money(base_amount) if base_amount is not None else None,
        vat_inclusive=vat_inclusive,
        bank_account=bank_account,
        reverses=reverses,
        source_type=source.__class__.__name__ if source is not None else "",
        source_id=source.pk if source is not None else None,
        created_by=actor.user,
    )

    LedgerEntry.objects.bulk_create([
        LedgerEntry(
            company=actor.company,
            transaction=txn,
            account=account,
            line_no=line_no,
            entry_date=txn_date,
            description=line_description or description or "",
            debit=debit,
            credit=credit,
        )
        for line_no, (account, debit, credit, line_description) in enumerate(prepared, start=1)
    ])

    event = emit_event(
        actor,
        EventTypes.TRANSACTION_POSTED,
        "Transaction",
        txn.id,
        {
            "transaction_id": txn.id,
            "transaction_type": transaction_type,
            "date": txn_date,
            "reference": txn.reference,
            "total_debit": total_debit,
            "total_credit": total_credit,
            "vat_amount": txn.vat_amount,
            "lines": [
                {"account_code": a.code, "debit": d, "credit": c}
                for a, d, c, _ in prepared
            ],
        },
        idempotency_key=event_key or f"transaction.posted:{txn.id}",
    )
    logger.info(
        "Transaction posted",
        extra={"company_id": actor.company.id, "transaction_id": txn.id, "type": transaction_type},
    )
    return CommandResult.ok(txn, event=event)


def _bank_movement(txn: Transaction) -> Decimal:
    """Net debit the transaction put through its bank account's ledger account."""
    ledger = bank_ledger_account(txn.bank_account)
    return sum((e.debit - e.credit for e in txn.entries.filter(account=ledger)), ZERO)


@transaction.atomic
def post_journal(
    actor: ActorContext,
    txn_date: date,
    description: str,
    lines: list,
    reference: str = "",
    transaction_type: str = Transaction.TransactionType.JOURNAL,
    vat_rate=ZERO,
    vat_amount=ZERO,
    base_amount=None,
    vat_inclusive: bool = False,
    bank_account_id: Optional[int] = None,
) -> CommandResult:
    """
    Post a manual journal.

    INCOME and EXPENSE journals may carry VAT details, which feed the VAT
    returns. When ``bank_account_id`` is given, the lines must touch that
    bank account's ledger account and its running balance follows the
    net movement.
    """
    require(actor, "journal.post")

    if transaction_type not in (
        Transaction.TransactionType.JOURNAL,
        Transaction.TransactionType.OPENING_BALANCE,
        Transaction.TransactionType.INCOME,
        Transaction.TransactionType.EXPENSE,
    ):
        return CommandResult.fail("Only journal, opening balance, income or expense transactions can be posted manually.")

    vat_rate = to_decimal(vat_rate)
    if not (ZERO <= vat_rate <= 100):
        return CommandResult.fail("VAT rate must be between 0 and 100.")
    if money(vat_amount) < 0 or (base_amount is not None and money(base_amount) < 0):
        return CommandResult.fail("VAT and base amounts cannot be negative.")

    bank_account = None
    if bank_account_id:
        bank_account = BankAccount.objects.filter(pk=bank_account_id, company=actor.company).first()
        allowed, reason = can_use_bank_account(actor, bank_account)
        if not allowed:
            return CommandResult.fail(reason)

    result = record_transaction(
        actor,
        txn_date=txn_date,
        description=description,
        lines=lines,
        transaction_type=transaction_type,
        reference=reference,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        base_amount=base_amount,
        vat_inclusive=vat_inclusive,
        bank_account=bank_account,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result

    if bank_account is not None:
        movement = _bank_movement(result.data)
        if not movement:
            transaction.set_rollback(True)
            return CommandResult.fail("Journal lines must include the bank account's ledger account.")
        adjust_bank_balance(bank_account, abs(movement), "add" if movement > 0 else "subtract")
    return result


def reverse_posted(
    actor: ActorContext,
    txn: Transaction,
    reversal_date: Optional[date] = None,
    reason: str = "",
) -> CommandResult:
    """
    Write the mirror REVERSAL transaction for ``txn`` and mark the original
    REVERSED. Permission checks are the caller's job.
    """
    allowed, why = can_reverse_transaction(actor, txn)
    if not allowed:
        return CommandResult.fail(why)

    entries = list(txn.entries.select_related("account").all())
    lines = [
        {
            "account": e.account,
            "debit": e.credit,
            "credit": e.debit,
            "description": f"Reversal: {e.description}",
        }
        for e in entries
    ]

    result = record_transaction(
        actor,
        txn_date=reversal_date or txn.date,
        description=f"Reversal of {txn.reference or txn.description or txn.id}",
        lines=lines,
        transaction_type=Transaction.TransactionType.REVERSAL,
        reference=txn.reference,
        total_amount=txn.total_amount,
        reverses=txn,
        event_key=f"transaction.reversal_posted:{txn.id}",
    )
    if not result.success:
        return result
    reversal = result.data

    txn.entries.update(is_reversed=True)
    txn.status = Transaction.Status.REVERSED
    txn.save(update_fields=["status"])

    event = emit_event(
        actor,
        EventTypes.TRANSACTION_REVERSED,
        "Transaction",
        txn.id,
        {"transaction_id": txn.id, "reversal_id": reversal.id, "reason": reason},
        idempotency_key=f"transaction.reversed:{txn.id}",
    )
    return CommandResult.ok({"original": txn, "reversal": reversal}, event=event)


@transaction.atomic
def reverse_transaction(
    actor: ActorContext,
    transaction_id: int,
    reversal_date: Optional[date] = None,
    reason: str = "",
) -> CommandResult:
    require(actor, "journal.reverse")

    try:
        txn = Transaction.objects.select_for_update().get(pk=transaction_id, company=actor.company)
    except Transaction.DoesNotExist:
        return CommandResult.fail("Transaction not found.")

    result = reverse_posted(actor, txn, reversal_date, reason)
    if not result.success:
        transaction.set_rollback(True)
        return result

    if txn.bank_account_id:
        # Undo the bank movement the original made.
        movement = _bank_movement(txn)
        if movement:
            adjust_bank_balance(txn.bank_account, abs(movement), "subtract" if movement > 0 else "add")
    return result
