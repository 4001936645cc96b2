# events/emitter.py
"""
Event emission functions.

All audit events MUST be emitted through these functions so that:
1. Payloads are checked against the registry in events/types.py
2. Idempotency is honoured (same key -> same event row)
3. Decimals, dates and model ids are stored as JSON-safe values
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from events.models import BusinessEvent
from events.types import validate_event_payload

logger = logging.getLogger(__name__)


def json_safe(value: Any) -> Any:
    """Recursively convert Decimals and dates into strings."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


def idempotency_hash(prefix: str, payload: dict) -> str:
    normalized = json.dumps(json_safe(payload), sort_keys=True, separators=(",", ":")).encode()
    digest = hashlib.sha256(normalized).hexdigest()[:16]
    return f"{prefix}:{digest}"


def _emit_event_core(
    *,
    company,
    user,
    event_type: str,
    aggregate_type: str,
    aggregate_id: Any,
    data: Dict[str, Any],
    idempotency_key: Optional[str],
    metadata: Optional[Dict[str, Any]],
    occurred_at: Optional[datetime],
) -> BusinessEvent:
    data = json_safe(data)
    validate_event_payload(event_type, data)

    if not idempotency_key:
        idempotency_key = idempotency_hash(event_type, {
            "aggregate_type": aggregate_type,
            "aggregate_id": str(aggregate_id),
            "data": data,
            "at": timezone.now().isoformat(),
        })

    existing = BusinessEvent.objects.filter(company=company, idempotency_key=idempotency_key).first()
    if existing:
        return existing

    try:
        with transaction.atomic():
            event = BusinessEvent.objects.create(
                company=company,
                event_type=event_type,
                aggregate_type=aggregate_type,
                aggregate_id=str(aggregate_id),
                data=data,
                metadata=json_safe(metadata or {}),
                caused_by_user=user,
                occurred_at=occurred_at or timezone.now(),
                idempotency_key=idempotency_key,
            )
    except IntegrityError:
        # Another worker inserted the same key first.
        existing = BusinessEvent.objects.filter(company=company, idempotency_key=idempotency_key).first()
        if existing:
            return existing
        raise

    logger.info(
        "Event emitted: %s %s#%s",
        event_type,
        aggregate_type,
        aggregate_id,
        extra={"company_id": company.id, "event_id": str(event.id)},
    )
    return event


def emit_event(
    actor,
    event_type: str,
    aggregate_type: str,
    aggregate_id: Any,
    data: Dict[str, Any],
    idempotency_key: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    occurred_at: Optional[datetime] = None,
) -> BusinessEvent:
    """
    Emit an audit event on behalf of an actor.

    Example:
        emit_event(
            actor,
            EventTypes.INVOICE_SENT,
            "Invoice",
            invoice.id,
            {"invoice_id": invoice.id, "invoice_number": "INV-000001", "transaction_id": txn.id},
            idempotency_key=f"invoice.sent:{invoice.id}",
        )

    Raises:
        InvalidEventPayload: If data is missing fields required for the type
        ValueError: If the event type is not registered
    """
    return _emit_event_core(
        company=actor.company,
        user=actor.user,
        event_type=event_type,
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        data=data,
        idempotency_key=idempotency_key,
        metadata=metadata,
        occurred_at=occurred_at,
    )


def emit_event_no_actor(
    *,
    company,
    user,
    event_type: str,
    aggregate_type: str,
    aggregate_id: Any,
    data: Dict[str, Any],
    idempotency_key: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    occurred_at: Optional[datetime] = None,
) -> BusinessEvent:
    """
    Emit an event without an ActorContext.

    Used for bootstrap (company creation), company switching and scheduled
    tasks, where there is no membership to resolve yet. ``user`` may be
    None for system events.
    """
    return _emit_event_core(
        company=company,
        user=user,
        event_type=event_type,
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        data=data,
        idempotency_key=idempotency_key,
        metadata=metadata,
        occurred_at=occurred_at,
    )
