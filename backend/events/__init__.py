# events/__init__.py
"""
Events app - audit trail of business events for Rigel.

This app provides:
- BusinessEvent: Immutable record of every state change a command makes
- Emitter functions: emit_event, emit_event_no_actor
- EventTypes: the catalogue of event names and their required payload keys

Payloads are checked against events/types.py when they are emitted.

Usage:
    from events.emitter import emit_event
    from events.types import EventTypes

    emit_event(
        actor,
        EventTypes.INVOICE_SENT,
        "Invoice",
        invoice.id,
        {"invoice_id": invoice.id, "transaction_id": txn.id},
        idempotency_key=f"invoice.sent:{invoice.id}",
    )

Handling validation errors:
    try:
        emit_event(...)
    except InvalidEventPayload as e:
        # e.event_type - the event type that failed
        # e.errors - list of validation error messages
        logger.error(f"Invalid event payload: {e}")
"""

default_app_config = "events.apps.EventsConfig"
