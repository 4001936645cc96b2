# accounts/commands.py
"""
Command layer for company and membership operations.

ALL security-relevant mutations go through these commands:
- Company creation and settings
- Company switching
- Membership management

Each command validates, writes and emits an audit event. Views never
write these models directly.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.text import slugify

from accounts.authz import ActorContext, require
from accounts.models import Company, CompanyMembership
from accounts.permissions import grant_role_defaults
from events.emitter import emit_event, emit_event_no_actor, idempotency_hash
from events.types import EventTypes

User = get_user_model()
logger = logging.getLogger(__name__)


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = create_company(user, "Acme Trading")
        if result.success:
            company = result.data["company"]
        else:
            error_message = result.error
    """

    def __init__(self, success: bool, data=None, error: str = None, event=None):
        self.success = success
        self.data = data
        self.error = error
        self.event = event  # The emitted event, if any

    @classmethod
    def ok(cls, data=None, event=None):
        return cls(success=True, data=data, event=event)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)


# =============================================================================
# Company creation
# =============================================================================

def _unique_slug(name: str) -> str:
    base_slug = slugify(name) or "company"
    slug = base_slug
    suffix = 1
    while Company.objects.filter(slug=slug).exists():
        slug = f"{base_slug}-{suffix}"
        suffix += 1
    return slug


@transaction.atomic
def create_company(
    user,
    company_name: str,
    currency: str = "ZAR",
    vat_number: str = "",
    vat_registered: bool = True,
    fiscal_year_start_month: int = 3,
    seed_chart: bool = True,
) -> CommandResult:
    """
    Create a new company for an existing user.

    The user becomes the OWNER, receives the owner's default permissions,
    and the user's active company is switched to the new one. The default
    chart of accounts is seeded unless ``seed_chart`` is False.
    """
    if not company_name or not company_name.strip():
        return CommandResult.fail("Company name is required.")
    if not (1 <= int(fiscal_year_start_month) <= 12):
        return CommandResult.fail("Fiscal year start month must be 1-12.")
    if len(currency or "") != 3:
        return CommandResult.fail("Currency must be 3-letter ISO code.")

    name = company_name.strip()
    company = Company.objects.create(
        name=name,
        slug=_unique_slug(name),
        currency=currency.upper(),
        vat_number=vat_number,
        vat_registered=vat_registered,
        fiscal_year_start_month=fiscal_year_start_month,
    )
    membership = CompanyMembership.objects.create(
        user=user,
        company=company,
        role=CompanyMembership.Role.OWNER,
    )
    grant_role_defaults(membership, granted_by=user)

    if seed_chart:
        from accounting.chart import seed_default_chart
        seed_default_chart(company)

    user.active_company = company
    user.save(update_fields=["active_company"])

    event = emit_event_no_actor(
        company=company,
        user=user,
        event_type=EventTypes.COMPANY_CREATED,
        aggregate_type="Company",
        aggregate_id=company.id,
        idempotency_key=f"company.created:{company.id}",
        data={
            "company_id": company.id,
            "name": company.name,
            "slug": company.slug,
            "owner_id": user.id,
        },
    )
    logger.info("Company created", extra={"company_id": company.id, "user_id": user.id})

    return CommandResult.ok({"company": company, "membership": membership}, event=event)


# =============================================================================
# Company switching
# =============================================================================

@transaction.atomic
def switch_active_company(user, target_company_id: int) -> CommandResult:
    """
    Switch the user's active company.

    Takes a plain user, not an ActorContext: the user may not have an
    active company yet.
    """
    if isinstance(user, ActorContext):
        user = user.user

    if not user or not user.is_authenticated:
        return CommandResult.fail("Authentication required.")

    try:
        target_company = Company.objects.get(pk=target_company_id, is_active=True)
    except Company.DoesNotExist:
        return CommandResult.fail("Company not found or inactive.")

    try:
        membership = CompanyMembership.objects.get(
            user=user, company=target_company, is_active=True
        )
    except CompanyMembership.DoesNotExist:
        return CommandResult.fail("You do not have an active membership for that company.")

    old_company_id = user.active_company_id
    user.active_company = target_company
    user.save(update_fields=["active_company"])

    event = emit_event_no_actor(
        company=target_company,
        user=user,
        event_type=EventTypes.USER_COMPANY_SWITCHED,
        aggregate_type="User",
        aggregate_id=user.id,
        data={
            "user_id": user.id,
            "from_company_id": old_company_id,
            "to_company_id": target_company.id,
        },
    )

    return CommandResult.ok({
        "company_id": target_company.id,
        "company_name": target_company.name,
        "role": membership.role,
        "membership_id": membership.id,
    }, event=event)


# =============================================================================
# Company settings
# =============================================================================

_RATE_SETTINGS = {"vat_rate", "corporate_tax_rate"}
_SETTINGS_FIELDS = {
    "name",
    "currency",
    "vat_number",
    "vat_registered",
    "vat_rate",
    "corporate_tax_rate",
    "fiscal_year_start_month",
    "fiscal_default_year",
    "fiscal_lock_year",
    "payroll_tax_config",
}


@transaction.atomic
def update_company_settings(actor: ActorContext, **settings) -> CommandResult:
    """
    Update company configuration: identity, VAT/tax and fiscal calendar.

    Unknown keys are ignored. Returns "No changes" when nothing differs.
    """
    require(actor, "company.manage_settings")

    company = Company.objects.select_for_update().get(pk=actor.company.pk)

    changes = {}
    for setting, new_value in settings.items():
        if setting not in _SETTINGS_FIELDS:
            continue
        if setting in _RATE_SETTINGS and new_value is not None:
            try:
                new_value = Decimal(str(new_value))
            except InvalidOperation:
                return CommandResult.fail(f"{setting} must be a number.")
        old_value = getattr(company, setting)
        if old_value != new_value:
            changes[setting] = {"old": old_value, "new": new_value}

    if not changes:
        return CommandResult.ok({"company": company, "message": "No changes"})

    if "currency" in changes and len(changes["currency"]["new"] or "") != 3:
        return CommandResult.fail("Currency must be 3-letter ISO code.")

    if "fiscal_year_start_month" in changes:
        new_month = changes["fiscal_year_start_month"]["new"]
        if not (1 <= int(new_month) <= 12):
            return CommandResult.fail("Fiscal year start month must be 1-12.")

    for rate_field in _RATE_SETTINGS & changes.keys():
        rate = changes[rate_field]["new"]
        if rate is None or not (Decimal("0") <= rate <= Decimal("100")):
            return CommandResult.fail(f"{rate_field} must be between 0 and 100.")

    if changes.get("fiscal_lock_year", {}).get("new"):
        default_year = changes.get("fiscal_default_year", {}).get("new", company.fiscal_default_year)
        if not default_year:
            return CommandResult.fail("A default fiscal year is required to lock the year.")

    for setting, change in changes.items():
        setattr(company, setting, change["new"])
    company.save(update_fields=list(changes.keys()))

    event = emit_event(
        actor,
        EventTypes.COMPANY_SETTINGS_UPDATED,
        "Company",
        company.id,
        {"changes": changes},
        idempotency_key=idempotency_hash("company.settings", {
            "company_id": company.id,
            "changes": changes,
        }),
    )

    return CommandResult.ok({"company": company}, event=event)


# =============================================================================
# Memberships
# =============================================================================

@transaction.atomic
def add_user_to_company(
    actor: ActorContext,
    email: str,
    role: str = CompanyMembership.Role.USER,
) -> CommandResult:
    """Add an existing user (looked up by email) to the actor's company."""
    require(actor, "company.manage_users")

    valid_roles = [r[0] for r in CompanyMembership.Role.choices]
    if role not in valid_roles:
        return CommandResult.fail(f"Invalid role. Must be one of: {valid_roles}")
    if role == CompanyMembership.Role.OWNER and not actor.is_owner:
        return CommandResult.fail("Only the owner can assign OWNER role.")

    try:
        user = User.objects.get(email__iexact=email)
    except User.DoesNotExist:
        return CommandResult.fail("User not found.")

    membership = CompanyMembership.objects.filter(user=user, company=actor.company).first()
    if membership and membership.is_active:
        return CommandResult.fail("User is already a member of this company.")

    if membership:
        membership.is_active = True
        membership.role = role
        membership.save(update_fields=["is_active", "role"])
        grant_role_defaults(membership, granted_by=actor.user, overwrite=True)
    else:
        membership = CompanyMembership.objects.create(
            user=user,
            company=actor.company,
            role=role,
        )
        grant_role_defaults(membership, granted_by=actor.user)

    event = emit_event(
        actor,
        EventTypes.MEMBERSHIP_CREATED,
        "CompanyMembership",
        membership.id,
        {"membership_id": membership.id, "user_id": user.id, "role": role},
    )
    return CommandResult.ok(membership, event=event)


@transaction.atomic
def update_membership_role(
    actor: ActorContext,
    membership_id: int,
    new_role: str,
) -> CommandResult:
    """
    Change a member's role. Permissions are reset to the new role's
    defaults.
    """
    require(actor, "company.manage_users")

    try:
        membership = CompanyMembership.objects.select_related("user").get(
            pk=membership_id, company=actor.company
        )
    except CompanyMembership.DoesNotExist:
        return CommandResult.fail("Membership not found.")

    valid_roles = [r[0] for r in CompanyMembership.Role.choices]
    if new_role not in valid_roles:
        return CommandResult.fail(f"Invalid role. Must be one of: {valid_roles}")

    if membership.role == CompanyMembership.Role.OWNER and not actor.is_owner:
        return CommandResult.fail("Cannot modify the owner's role.")

    if new_role == CompanyMembership.Role.OWNER and not actor.is_owner:
        return CommandResult.fail("Only the owner can assign OWNER role.")

    if (membership.user_id == actor.user.id and
            membership.role == CompanyMembership.Role.OWNER and
            new_role != CompanyMembership.Role.OWNER):
        return CommandResult.fail("Cannot demote yourself from owner. Transfer ownership first.")

    old_role = membership.role
    membership.role = new_role
    membership.save(update_fields=["role"])
    grant_role_defaults(membership, granted_by=actor.user, overwrite=True)

    event = emit_event(
        actor,
        EventTypes.MEMBERSHIP_ROLE_CHANGED,
        "CompanyMembership",
        membership.id,
        {"membership_id": membership.id, "old_role": old_role, "new_role": new_role},
    )
    return CommandResult.ok(membership, event=event)
