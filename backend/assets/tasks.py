# assets/tasks.py
"""
Celery tasks for fixed assets.

post_monthly_depreciation_all is scheduled by CELERY_BEAT_SCHEDULE in
settings; it can also be run by hand:

    from assets.tasks import post_monthly_depreciation_all
    post_monthly_depreciation_all.delay()
"""
import logging
from datetime import date
from typing import Optional

from celery import shared_task

logger = logging.getLogger(__name__)


def _owner_actor(company):
    """Actor for the company's first active owner, or None."""
    from accounts.authz import actor_for
    from accounts.models import CompanyMembership

    membership = (
        CompanyMembership.objects.select_related("user")
        .filter(company=company, role=CompanyMembership.Role.OWNER, is_active=True)
        .order_by("id")
        .first()
    )
    if membership is None:
        return None
    return actor_for(membership.user, company)


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def post_company_depreciation(self, company_id: int, as_of: Optional[str] = None) -> dict:
    """Post depreciation up to ``as_of`` (ISO date, default today) for one company."""
    from accounts.models import Company
    from assets.commands import post_monthly_depreciation

    company = Company.objects.filter(pk=company_id, is_active=True).first()
    if company is None:
        logger.error(f"Company {company_id} not found")
        return {"error": f"Company {company_id} not found"}

    actor = _owner_actor(company)
    if actor is None:
        logger.warning("No active owner; depreciation skipped", extra={"company_id": company_id})
        return {"company_id": company_id, "skipped": True}

    run_date = date.fromisoformat(as_of) if as_of else date.today()
    try:
        result = post_monthly_depreciation(actor, run_date)
    except Exception as exc:
        logger.exception("Depreciation run failed", extra={"company_id": company_id})
        raise self.retry(exc=exc)

    if not result.success:
        logger.error("Depreciation run rejected", extra={"company_id": company_id, "error": result.error})
        return {"company_id": company_id, "error": result.error}

    return {
        "company_id": company_id,
        "as_of": run_date.isoformat(),
        "total": str(result.data["total"]),
        "assets": len(result.data["assets"]),
    }


@shared_task
def post_monthly_depreciation_all(as_of: Optional[str] = None) -> dict:
    """Run the depreciation posting for every active company."""
    from accounts.models import Company

    results = {}
    for company_id in Company.objects.filter(is_active=True).values_list("id", flat=True):
        try:
            results[company_id] = post_company_depreciation(company_id, as_of)
        except Exception as e:
            logger.exception(f"Depreciation failed for company {company_id}: {e}")
            results[company_id] = {"company_id": company_id, "error": str(e)}

    logger.info(f"Depreciation posted for {len(results)} companies")
    return results
