# budgeting/commands.py
"""Budget entry commands."""

import logging

from django.db import IntegrityError, transaction

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import money
from accounting.models import Account
from events.emitter import emit_event
from events.types import EventTypes

from .models import Budget

logger = logging.getLogger(__name__)

BUDGETABLE_TYPES = (Account.AccountType.INCOME, Account.AccountType.EXPENSE)
DUPLICATE_PERIOD = "An entry for this account and period already exists."
UPDATABLE_FIELDS = ("name", "budgeted_amount", "notes", "status")


def _validate_period(year, month):
    if not 1 <= int(month) <= 12:
        return "Month must be between 1 and 12."
    if not 1900 <= int(year) <= 2999:
        return "Invalid budget year."
    return None


@transaction.atomic
def create_budget(
    actor: ActorContext,
    account_id: int,
    year: int,
    month: int,
    budgeted_amount,
    name: str = "",
    notes: str = "",
    status: str = Budget.Status.ACTIVE,
) -> CommandResult:
    require(actor, "budgets.manage")

    account = Account.objects.filter(
        pk=account_id, company=actor.company, account_type__in=BUDGETABLE_TYPES,
    ).first()
    if not account:
        return CommandResult.fail("Budgets can only be set for income or expense accounts of this company.")

    error = _validate_period(year, month)
    if error:
        return CommandResult.fail(error)
    if status not in Budget.Status.values:
        return CommandResult.fail(f"Invalid status: {status}")

    if Budget.objects.filter(company=actor.company, account=account, year=year, month=month).exists():
        return CommandResult.fail(DUPLICATE_PERIOD)

    try:
        with transaction.atomic():
            budget = Budget.objects.create(
                company=actor.company,
                account=account,
                name=(name or "").strip() or account.name,
                year=year,
                month=month,
                budgeted_amount=money(budgeted_amount),
                notes=notes or "",
                status=status,
                created_by=actor.user,
            )
    except IntegrityError:
        return CommandResult.fail(DUPLICATE_PERIOD)

    event = emit_event(
        actor,
        EventTypes.BUDGET_CREATED,
        "Budget",
        budget.id,
        {
            "budget_id": budget.id,
            "account_id": account.id,
            "year": year,
            "month": month,
            "budgeted_amount": budget.budgeted_amount,
        },
        idempotency_key=f"budget.created:{budget.id}",
    )
    return CommandResult.ok(budget, event=event)


@transaction.atomic
def update_budget(actor: ActorContext, budget_id: int, **updates) -> CommandResult:
    require(actor, "budgets.manage")

    budget = Budget.objects.select_for_update().filter(pk=budget_id, company=actor.company).first()
    if not budget:
        return CommandResult.fail("Budget not found.")

    if "budgeted_amount" in updates:
        updates["budgeted_amount"] = money(updates["budgeted_amount"])
    if "status" in updates and updates["status"] not in Budget.Status.values:
        return CommandResult.fail(f"Invalid status: {updates['status']}")

    changes = {
        field: {"old": getattr(budget, field), "new": value}
        for field, value in updates.items()
        if field in UPDATABLE_FIELDS and getattr(budget, field) != value
    }
    if not changes:
        return CommandResult.ok(budget)

    for field, change in changes.items():
        setattr(budget, field, change["new"])
    if not budget.name.strip():
        budget.name = budget.account.name
    budget.save()

    event = emit_event(
        actor,
        EventTypes.BUDGET_UPDATED,
        "Budget",
        budget.id,
        {"budget_id": budget.id, "changes": changes},
    )
    return CommandResult.ok(budget, event=event)


@transaction.atomic
def delete_budget(actor: ActorContext, budget_id: int) -> CommandResult:
    require(actor, "budgets.manage")

    budget = Budget.objects.filter(pk=budget_id, company=actor.company).first()
    if not budget:
        return CommandResult.fail("Budget not found.")

    payload = {
        "budget_id": budget.id,
        "account_id": budget.account_id,
        "year": budget.year,
        "month": budget.month,
    }
    budget.delete()

    event = emit_event(
        actor,
        EventTypes.BUDGET_DELETED,
        "Budget",
        payload["budget_id"],
        payload,
        idempotency_key=f"budget.deleted:{payload['budget_id']}",
    )
    logger.info("Budget deleted", extra={"company_id": actor.company.id, "budget_id": payload["budget_id"]})
    return CommandResult.ok(payload, event=event)
