# assets/commands.py
"""
Command layer for fixed assets.

Postings:
    register_asset:           Dr Asset / Cr Bank, Loans Payable or Opening Balance Equity
    post_monthly_depreciation: Dr Depreciation Expense / Cr Accumulated Depreciation
    dispose_asset:            Dr Bank proceeds, Dr Accumulated Depreciation,
                              Cr Asset cost, Cr Gain or Dr Loss on Sale of Assets
"""

import logging
from datetime import date
from typing import Optional

from django.db import transaction

from accounts.authz import ActorContext, require
from accounts.commands import CommandResult
from accounting.amounts import ZERO, money, to_decimal
from accounting.commands import adjust_bank_balance, record_transaction
from accounting.models import Account, BankAccount, Transaction
from accounting.policies import BALANCE_TOLERANCE, can_use_bank_account
from accounting.resolution import bank_ledger_account, ensure_account
from events.emitter import emit_event
from events.types import EventTypes

from .depreciation import accumulated_for
from .models import FixedAsset

logger = logging.getLogger(__name__)

DISPOSAL_STATUSES = {
    "disposed": FixedAsset.Status.DISPOSED,
    "sold": FixedAsset.Status.SOLD,
    "scrapped": FixedAsset.Status.SCRAPPED,
}


def _asset_account(company, asset_account_id: Optional[int]) -> Optional[Account]:
    if asset_account_id is None:
        return ensure_account(company, "ppe")
    return Account.objects.filter(
        pk=asset_account_id,
        company=company,
        account_type=Account.AccountType.ASSET,
        is_active=True,
    ).first()


# =============================================================================
# Registration
# =============================================================================

@transaction.atomic
def register_asset(
    actor: ActorContext,
    description: str,
    cost,
    purchase_date: date,
    useful_life_years,
    funding_source: str = FixedAsset.FundingSource.BANK,
    bank_account_id: Optional[int] = None,
    asset_account_id: Optional[int] = None,
    as_of: Optional[date] = None,
) -> CommandResult:
    """
    Register an ACTIVE asset and post its acquisition.

    Opening-balance assets already carry depreciation up to ``as_of``
    (default today); it is credited to Accumulated Depreciation so the
    ledger matches the register.
    """
    require(actor, "assets.manage")

    description = (description or "").strip()
    if not description:
        return CommandResult.fail("Asset description is required.")

    cost = money(cost)
    if cost <= 0:
        return CommandResult.fail("Asset cost must be greater than zero.")
    life = to_decimal(useful_life_years)
    if life <= 0:
        return CommandResult.fail("Useful life must be greater than zero.")
    if funding_source not in FixedAsset.FundingSource.values:
        return CommandResult.fail(f"Invalid funding source: {funding_source}")

    company = actor.company
    asset_account = _asset_account(company, asset_account_id)
    if asset_account is None:
        return CommandResult.fail("Asset account must be an active asset account of this company.")

    bank_account = None
    if funding_source == FixedAsset.FundingSource.BANK:
        if not bank_account_id:
            return CommandResult.fail("A bank account is required for bank-funded assets.")
        bank_account = BankAccount.objects.filter(pk=bank_account_id).first()
        allowed, reason = can_use_bank_account(actor, bank_account)
        if not allowed:
            return CommandResult.fail(reason)

    asset = FixedAsset.objects.create(
        company=company,
        description=description,
        cost=cost,
        purchase_date=purchase_date,
        useful_life_years=life,
        status=FixedAsset.Status.ACTIVE,
        funding_source=funding_source,
        asset_account=asset_account,
        created_by=actor.user,
    )

    narration = f"Asset purchase - {description}"
    lines = [{"account": asset_account, "debit": cost, "description": narration}]
    if funding_source == FixedAsset.FundingSource.BANK:
        lines.append({"account": bank_ledger_account(bank_account), "credit": cost, "description": narration})
    elif funding_source == FixedAsset.FundingSource.LOAN:
        lines.append({"account": ensure_account(company, "loan"), "credit": cost, "description": narration})
    else:
        as_of = as_of or date.today()
        carried = accumulated_for(asset, as_of)
        lines.append({
            "account": ensure_account(company, "opening_equity"),
            "credit": cost - carried,
            "description": narration,
        })
        if carried > 0:
            lines.append({
                "account": ensure_account(company, "accumulated_depreciation"),
                "credit": carried,
                "description": f"Depreciation to {as_of} - {description}",
            })
            asset.accumulated_depreciation = carried
            asset.last_depreciation_date = as_of

    result = record_transaction(
        actor,
        txn_date=purchase_date,
        description=narration,
        lines=lines,
        transaction_type=Transaction.TransactionType.ASSET_PURCHASE,
        reference=f"FA-{asset.id}",
        total_amount=cost,
        bank_account=bank_account,
        source=asset,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result

    if bank_account is not None:
        adjust_bank_balance(bank_account, cost, "subtract")

    asset.acquisition_transaction = result.data
    asset.save(update_fields=[
        "acquisition_transaction", "accumulated_depreciation", "last_depreciation_date", "updated_at",
    ])

    event = emit_event(
        actor,
        EventTypes.ASSET_REGISTERED,
        "FixedAsset",
        asset.id,
        {
            "asset_id": asset.id,
            "description": description,
            "cost": cost,
            "purchase_date": purchase_date,
            "funding_source": funding_source,
            "transaction_id": result.data.id,
        },
        idempotency_key=f"asset.registered:{asset.id}",
    )
    logger.info("Asset registered", extra={"company_id": company.id, "asset_id": asset.id})
    return CommandResult.ok(asset, event=event)


# =============================================================================
# Depreciation
# =============================================================================

def _catch_up(actor, asset: FixedAsset, as_of: date):
    """
    Post depreciation between the stored figure and the figure at ``as_of``.

    Returns (CommandResult, amount); amount is zero when nothing was due.
    """
    target = accumulated_for(asset, as_of)
    delta = money(target - asset.accumulated_depreciation)
    if delta <= 0:
        return CommandResult.ok(None), ZERO

    narration = f"Depreciation - {asset.description}"
    result = record_transaction(
        actor,
        txn_date=as_of,
        description=narration,
        lines=[
            {"account": ensure_account(actor.company, "depreciation_expense"), "debit": delta},
            {"account": ensure_account(actor.company, "accumulated_depreciation"), "credit": delta},
        ],
        transaction_type=Transaction.TransactionType.DEPRECIATION,
        reference=f"FA-{asset.id}",
        source=asset,
        event_key=f"transaction.posted:depreciation:{asset.id}:{as_of}",
    )
    if not result.success:
        return result, ZERO

    asset.accumulated_depreciation = target
    asset.last_depreciation_date = as_of
    asset.save(update_fields=["accumulated_depreciation", "last_depreciation_date", "updated_at"])

    emit_event(
        actor,
        EventTypes.ASSET_DEPRECIATED,
        "FixedAsset",
        asset.id,
        {"asset_id": asset.id, "amount": delta, "as_of": as_of, "transaction_id": result.data.id},
        idempotency_key=f"asset.depreciated:{asset.id}:{as_of}",
    )
    return result, delta


@transaction.atomic
def post_monthly_depreciation(actor: ActorContext, as_of: Optional[date] = None) -> CommandResult:
    """
    Bring every ACTIVE asset's posted depreciation up to ``as_of``.

    Running it twice for the same date posts nothing the second time.
    """
    require(actor, "assets.depreciate")
    as_of = as_of or date.today()

    assets = FixedAsset.objects.select_for_update().filter(
        company=actor.company,
        status=FixedAsset.Status.ACTIVE,
        purchase_date__lte=as_of,
    )

    posted = []
    total = ZERO
    for asset in assets:
        result, amount = _catch_up(actor, asset, as_of)
        if not result.success:
            transaction.set_rollback(True)
            return result
        if amount > 0:
            posted.append({"asset_id": asset.id, "amount": amount, "transaction_id": result.data.id})
            total += amount

    logger.info(
        "Depreciation posted",
        extra={"company_id": actor.company.id, "as_of": str(as_of), "assets": len(posted)},
    )
    return CommandResult.ok({"as_of": as_of, "total": money(total), "assets": posted})


# =============================================================================
# Disposal
# =============================================================================

@transaction.atomic
def dispose_asset(
    actor: ActorContext,
    asset_id: int,
    disposal_date: date,
    proceeds=0,
    bank_account_id: Optional[int] = None,
    disposal_type: str = "sold",
) -> CommandResult:
    """
    Derecognise an asset.

    Depreciation is caught up to the disposal date first, so the entries
    clear the asset's full cost and accumulated depreciation.
    """
    require(actor, "assets.manage")

    asset = (
        FixedAsset.objects.select_for_update()
        .filter(pk=asset_id, company=actor.company)
        .first()
    )
    if not asset:
        return CommandResult.fail("Asset not found.")
    if asset.status != FixedAsset.Status.ACTIVE:
        return CommandResult.fail(f"Cannot dispose of an asset with status {asset.status}.")
    if disposal_date < asset.purchase_date:
        return CommandResult.fail("Disposal date cannot be before the purchase date.")

    status = DISPOSAL_STATUSES.get((disposal_type or "").lower())
    if status is None:
        return CommandResult.fail(f"Invalid disposal type: {disposal_type}")

    proceeds = money(proceeds)
    if proceeds < 0:
        return CommandResult.fail("Proceeds cannot be negative.")

    bank_account = None
    if proceeds > 0:
        bank_account = BankAccount.objects.filter(pk=bank_account_id).first() if bank_account_id else None
        allowed, reason = can_use_bank_account(actor, bank_account)
        if not allowed:
            return CommandResult.fail(reason)

    result, _ = _catch_up(actor, asset, disposal_date)
    if not result.success:
        transaction.set_rollback(True)
        return result

    company = actor.company
    cost = money(asset.cost)
    accumulated = money(asset.accumulated_depreciation)
    nbv = cost - accumulated
    gain_or_loss = proceeds - nbv

    narration = f"Disposal - {asset.description}"
    lines = [{"account": asset.asset_account or ensure_account(company, "ppe"), "credit": cost}]
    if accumulated > 0:
        lines.append({"account": ensure_account(company, "accumulated_depreciation"), "debit": accumulated})
    if proceeds > 0:
        lines.append({"account": bank_ledger_account(bank_account), "debit": proceeds})
    if gain_or_loss > 0:
        lines.append({"account": ensure_account(company, "gain_on_disposal"), "credit": gain_or_loss})
    elif gain_or_loss < 0:
        lines.append({"account": ensure_account(company, "loss_on_disposal"), "debit": -gain_or_loss})

    total_debit = sum((money(line.get("debit")) for line in lines), ZERO)
    total_credit = sum((money(line.get("credit")) for line in lines), ZERO)
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        transaction.set_rollback(True)
        return CommandResult.fail("Unbalanced disposal entries")

    result = record_transaction(
        actor,
        txn_date=disposal_date,
        description=narration,
        lines=lines,
        transaction_type=Transaction.TransactionType.ASSET_DISPOSAL,
        reference=f"FA-{asset.id}",
        total_amount=cost,
        bank_account=bank_account,
        source=asset,
    )
    if not result.success:
        transaction.set_rollback(True)
        return result

    if bank_account is not None:
        adjust_bank_balance(bank_account, proceeds, "add")

    asset.status = status
    asset.disposal_date = disposal_date
    asset.disposal_amount = proceeds
    asset.disposal_transaction = result.data
    asset.save(update_fields=[
        "status", "disposal_date", "disposal_amount", "disposal_transaction", "updated_at",
    ])

    event = emit_event(
        actor,
        EventTypes.ASSET_DISPOSED,
        "FixedAsset",
        asset.id,
        {
            "asset_id": asset.id,
            "proceeds": proceeds,
            "net_book_value": nbv,
            "gain_or_loss": gain_or_loss,
            "transaction_id": result.data.id,
        },
        idempotency_key=f"asset.disposed:{asset.id}",
    )
    return CommandResult.ok(asset, event=event)
