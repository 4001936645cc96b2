# reporting/commands.py
"""Manual trial balance line commands."""

from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import ZERO, money
from events.emitter import emit_event
from events.types import EventTypes

from .models import TrialBalanceLine

LINE_FIELDS = ("account_code", "account_name", "debit", "credit")


def _check_line(account_code, account_name, debit, credit):
    if not (account_code or "").strip():
        return "Account code is required."
    if not (account_name or "").strip():
        return "Account name is required."
    if debit < 0 or credit < 0:
        return "Debit and credit cannot be negative."
    return None


@transaction.atomic
def create_trial_balance_line(
    actor: ActorContext,
    account_code: str,
    account_name: str,
    debit=ZERO,
    credit=ZERO,
) -> CommandResult:
    require(actor, "trial_balance.manage")

    debit = money(debit)
    credit = money(credit)
    error = _check_line(account_code, account_name, debit, credit)
    if error:
        return CommandResult.fail(error)

    line = TrialBalanceLine.objects.create(
        company=actor.company,
        account_code=account_code.strip(),
        account_name=account_name.strip(),
        debit=debit,
        credit=credit,
        created_by=actor.user,
    )
    event = emit_event(
        actor,
        EventTypes.TRIAL_BALANCE_LINE_CREATED,
        "TrialBalanceLine",
        line.id,
        {"line_id": line.id, "account_code": line.account_code, "debit": debit, "credit": credit},
        idempotency_key=f"trial_balance_line.created:{line.id}",
    )
    return CommandResult.ok(line, event=event)


@transaction.atomic
def update_trial_balance_line(actor: ActorContext, line_id: int, **updates) -> CommandResult:
    require(actor, "trial_balance.manage")

    line = TrialBalanceLine.objects.select_for_update().filter(pk=line_id, company=actor.company).first()
    if not line:
        return CommandResult.fail("Trial balance line not found.")

    for field in ("debit", "credit"):
        if field in updates:
            updates[field] = money(updates[field])

    changes = {
        field: {"old": getattr(line, field), "new": value}
        for field, value in updates.items()
        if field in LINE_FIELDS and getattr(line, field) != value
    }
    if not changes:
        return CommandResult.ok(line)

    for field, change in changes.items():
        setattr(line, field, change["new"])
    error = _check_line(line.account_code, line.account_name, line.debit, line.credit)
    if error:
        transaction.set_rollback(True)
        return CommandResult.fail(error)
    line.save()

    event = emit_event(
        actor,
        EventTypes.TRIAL_BALANCE_LINE_UPDATED,
        "TrialBalanceLine",
        line.id,
        {"line_id": line.id, "changes": changes},
    )
    return CommandResult.ok(line, event=event)


@transaction.atomic
def delete_trial_balance_line(actor: ActorContext, line_id: int) -> CommandResult:
    require(actor, "trial_balance.manage")

    line = TrialBalanceLine.objects.filter(pk=line_id, company=actor.company).first()
    if not line:
        return CommandResult.fail("Trial balance line not found.")

    line_pk = line.id
    line.delete()
    event = emit_event(
        actor,
        EventTypes.TRIAL_BALANCE_LINE_DELETED,
        "TrialBalanceLine",
        line_pk,
        {"line_id": line_pk},
        idempotency_key=f"trial_balance_line.deleted:{line_pk}",
    )
    return CommandResult.ok({"line_id": line_pk}, event=event)


def trial_balance_line_summary(company) -> dict:
    """Totals of the manual lines. Balanced only when debits equal credits exactly."""
    lines = TrialBalanceLine.objects.filter(company=company)
    total_debit = money(sum((line.debit for line in lines), ZERO))
    total_credit = money(sum((line.credit for line in lines), ZERO))
    return {
        "count": len(lines),
        "total_debit": total_debit,
        "total_credit": total_credit,
        "difference": abs(total_debit - total_credit),
        "is_balanced": total_debit == total_credit,
    }
