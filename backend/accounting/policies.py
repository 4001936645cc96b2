# accounting/policies.py
"""
Business policy functions for ledger operations.

Policies answer: "Is this action allowed given the current state?"
They do NOT perform the action; that's the command's job.

Usage:
    from accounting.policies import can_reverse_transaction

    allowed, reason = can_reverse_transaction(actor, txn)
    if not allowed:
        return CommandResult.fail(reason)

    # or assert-style
    assert_tenant_boundary(actor, txn)  # raises PermissionDenied

Principles:
1. Policies are pure functions (no side effects)
2. Policies return (bool, str) tuples for clear error messages
3. Commands compose policies as needed
"""

from decimal import Decimal

from django.core.exceptions import PermissionDenied

from accounting.models import Transaction

# Largest debit/credit mismatch accepted when posting.
BALANCE_TOLERANCE = Decimal("0.005")


class PolicyViolation(Exception):
    """Raised when a business policy is violated."""
    pass


# =============================================================================
# Tenant Boundary Policies
# =============================================================================

def check_tenant_boundary(actor, entity) -> bool:
    """Verify entity belongs to actor's company."""
    entity_company_id = getattr(entity, "company_id", None)
    if entity_company_id is None:
        company = getattr(entity, "company", None)
        entity_company_id = getattr(company, "id", None) if company else None
    return entity_company_id == actor.company.id


def assert_tenant_boundary(actor, entity) -> None:
    """Raise PermissionDenied if entity doesn't belong to actor's company."""
    if not check_tenant_boundary(actor, entity):
        raise PermissionDenied("Cross-company action denied.")


# =============================================================================
# Account Policies
# =============================================================================

def can_delete_account(actor, account) -> tuple[bool, str]:
    """
    Rules:
    - Must belong to actor's company
    - Cannot have ledger entries
    - Cannot be linked to a bank account
    """
    if not check_tenant_boundary(actor, account):
        return False, "Cross-company action denied."

    if account.entries.exists():
        return False, "Cannot delete an account that has transactions."

    if account.bank_accounts.exists():
        return False, "Cannot delete an account linked to a bank account."

    return True, ""


def can_change_account_type(actor, account) -> tuple[bool, str]:
    if not check_tenant_boundary(actor, account):
        return False, "Cross-company action denied."

    if account.entries.exists():
        return False, "Cannot change type of an account with transactions."

    return True, ""


def can_post_to_account(account) -> tuple[bool, str]:
    if not account.is_active:
        return False, f"Cannot post to inactive account: {account.code}"
    return True, ""


# =============================================================================
# Transaction Policies
# =============================================================================

def check_balanced(total_debit: Decimal, total_credit: Decimal) -> tuple[bool, str]:
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        return False, (
            f"Entry is not balanced: debits {total_debit} != credits {total_credit}."
        )
    return True, ""


def can_reverse_transaction(actor, txn) -> tuple[bool, str]:
    """
    Rules:
    - Must belong to actor's company
    - Only POSTED transactions
    - A reversal cannot itself be reversed
    """
    if not check_tenant_boundary(actor, txn):
        return False, "Cross-company action denied."

    if txn.status != Transaction.Status.POSTED:
        return False, "Only POSTED transactions can be reversed."

    if txn.transaction_type == Transaction.TransactionType.REVERSAL:
        return False, "A reversal cannot be reversed."

    if Transaction.objects.filter(reverses=txn).exists():
        return False, "This transaction was already reversed."

    return True, ""


def can_use_bank_account(actor, bank_account) -> tuple[bool, str]:
    if bank_account is None or not check_tenant_boundary(actor, bank_account):
        return False, "Invalid bank account selection for this company"
    if not bank_account.is_active:
        return False, "Bank account is inactive."
    return True, ""
