# accounts/permissions.py
from __future__ import annotations

from django.db import transaction

from accounts.models import AppPermission, CompanyMembership, CompanyMembershipPermission
from accounts.permission_defaults import ROLE_DEFAULTS, all_permission_codes


def ensure_permission_rows(codes) -> None:
    """Create AppPermission rows for any codes not yet in the table."""
    codes = set(codes)
    existing = set(AppPermission.objects.filter(code__in=codes).values_list("code", flat=True))
    missing = sorted(codes - existing)
    if missing:
        AppPermission.objects.bulk_create(
            [
                AppPermission(
                    code=c,
                    name=c.replace(".", " ").replace("_", " ").capitalize(),
                    module=c.split(".")[0],
                )
                for c in missing
            ],
            ignore_conflicts=True,
        )


@transaction.atomic
def grant_role_defaults(
    membership: CompanyMembership,
    granted_by=None,
    overwrite: bool = False,
) -> int:
    """
    Grant default permissions for the membership.role.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing permissions then grants defaults.
    Returns number of permissions newly granted.
    """
    default_codes = ROLE_DEFAULTS.get(membership.role, set())

    if overwrite:
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            company=membership.company,
        ).delete()

    ensure_permission_rows(default_codes)
    perms = list(AppPermission.objects.filter(code__in=default_codes))

    already = set(
        CompanyMembershipPermission.objects.filter(
            membership=membership,
            permission__in=perms,
        ).values_list("permission__code", flat=True)
    )

    to_grant = [p for p in perms if p.code not in already]
    if not to_grant:
        return 0

    CompanyMembershipPermission.objects.bulk_create(
        [
            CompanyMembershipPermission(
                membership=membership,
                company=membership.company,
                permission=p,
                granted_by=granted_by if (granted_by and granted_by.is_authenticated) else None,
            )
            for p in to_grant
        ],
        ignore_conflicts=True,
    )
    return len(to_grant)


@transaction.atomic
def seed_permissions() -> int:
    """Make sure every known permission code has a row. Returns the total."""
    codes = all_permission_codes()
    ensure_permission_rows(codes)
    return len(codes)
