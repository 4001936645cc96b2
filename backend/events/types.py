# events/types.py
"""
Event type definitions.

Every business operation writes one audit event. This module is the
registry of event names and the payload fields each one must carry.

Naming convention: {aggregate}.{past_tense_verb}
- invoice.sent (not invoice.send)
- transaction.reversed
"""

from typing import Any, Dict, List


class InvalidEventPayload(Exception):
    """Raised at emission time when a payload is missing required fields."""

    def __init__(self, event_type: str, errors: List[str]):
        self.event_type = event_type
        self.errors = errors
        error_list = "\n  - ".join(errors)
        super().__init__(
            f"Invalid payload for event '{event_type}':\n  - {error_list}"
        )


class EventTypes:
    """Registry of all event types."""

    # Company / membership
    COMPANY_CREATED = "company.created"
    COMPANY_SETTINGS_UPDATED = "company.settings_updated"
    USER_COMPANY_SWITCHED = "user.company_switched"
    MEMBERSHIP_CREATED = "membership.created"
    MEMBERSHIP_ROLE_CHANGED = "membership.role_changed"

    # Chart of accounts / banking
    ACCOUNT_CREATED = "account.created"
    ACCOUNT_UPDATED = "account.updated"
    ACCOUNT_DELETED = "account.deleted"
    BANK_ACCOUNT_CREATED = "bank_account.created"
    BANK_ACCOUNT_UPDATED = "bank_account.updated"

    # Ledger
    TRANSACTION_POSTED = "transaction.posted"
    TRANSACTION_REVERSED = "transaction.reversed"

    # Sales
    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_UPDATED = "customer.updated"
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    INVOICE_CREATED = "invoice.created"
    INVOICE_UPDATED = "invoice.updated"
    INVOICE_SENT = "invoice.sent"
    INVOICE_PAYMENT_RECORDED = "invoice.payment_recorded"
    INVOICE_CANCELLED = "invoice.cancelled"
    QUOTE_CREATED = "quote.created"
    QUOTE_CONVERTED = "quote.converted"
    QUOTE_DECLINED = "quote.declined"
    CREDIT_NOTE_CREATED = "credit_note.created"
    CREDIT_NOTE_ISSUED = "credit_note.issued"

    # Purchases
    SUPPLIER_CREATED = "supplier.created"
    SUPPLIER_UPDATED = "supplier.updated"
    PURCHASE_ORDER_CREATED = "purchase_order.created"
    PURCHASE_ORDER_SENT = "purchase_order.sent"
    PURCHASE_ORDER_PAID = "purchase_order.paid"
    BILL_CREATED = "bill.created"
    BILL_RECORDED = "bill.recorded"
    BILL_PAID = "bill.paid"

    # Fixed assets
    ASSET_REGISTERED = "asset.registered"
    ASSET_DEPRECIATED = "asset.depreciated"
    ASSET_DISPOSED = "asset.disposed"

    # Budgets
    BUDGET_CREATED = "budget.created"
    BUDGET_UPDATED = "budget.updated"
    BUDGET_DELETED = "budget.deleted"

    # Manual trial balance
    TRIAL_BALANCE_LINE_CREATED = "trial_balance_line.created"
    TRIAL_BALANCE_LINE_UPDATED = "trial_balance_line.updated"
    TRIAL_BALANCE_LINE_DELETED = "trial_balance_line.deleted"

    # Messaging
    MESSAGE_SENT = "message.sent"


# Fields every payload of the given type must contain.
EVENT_REQUIRED_FIELDS: Dict[str, tuple] = {
    EventTypes.COMPANY_CREATED: ("company_id", "name", "slug"),
    EventTypes.COMPANY_SETTINGS_UPDATED: ("changes",),
    EventTypes.USER_COMPANY_SWITCHED: ("user_id", "to_company_id"),
    EventTypes.MEMBERSHIP_CREATED: ("membership_id", "user_id", "role"),
    EventTypes.MEMBERSHIP_ROLE_CHANGED: ("membership_id", "old_role", "new_role"),

    EventTypes.ACCOUNT_CREATED: ("account_id", "code", "name", "account_type"),
    EventTypes.ACCOUNT_UPDATED: ("account_id", "changes"),
    EventTypes.ACCOUNT_DELETED: ("account_id", "code"),
    EventTypes.BANK_ACCOUNT_CREATED: ("bank_account_id", "name"),
    EventTypes.BANK_ACCOUNT_UPDATED: ("bank_account_id", "changes"),

    EventTypes.TRANSACTION_POSTED: ("transaction_id", "transaction_type", "date", "lines"),
    EventTypes.TRANSACTION_REVERSED: ("transaction_id", "reversal_id", "reason"),

    EventTypes.CUSTOMER_CREATED: ("customer_id", "name"),
    EventTypes.CUSTOMER_UPDATED: ("customer_id", "changes"),
    EventTypes.PRODUCT_CREATED: ("product_id", "name", "item_type"),
    EventTypes.PRODUCT_UPDATED: ("product_id", "changes"),
    EventTypes.INVOICE_CREATED: ("invoice_id", "invoice_number", "customer_id", "total_amount"),
    EventTypes.INVOICE_UPDATED: ("invoice_id", "total_amount"),
    EventTypes.INVOICE_SENT: ("invoice_id", "invoice_number", "transaction_id"),
    EventTypes.INVOICE_PAYMENT_RECORDED: ("invoice_id", "amount", "transaction_id", "status"),
    EventTypes.INVOICE_CANCELLED: ("invoice_id", "previous_status"),
    EventTypes.QUOTE_CREATED: ("quote_id", "quote_number", "total_amount"),
    EventTypes.QUOTE_CONVERTED: ("quote_id", "invoice_id"),
    EventTypes.QUOTE_DECLINED: ("quote_id",),
    EventTypes.CREDIT_NOTE_CREATED: ("credit_note_id", "credit_note_number", "total_amount"),
    EventTypes.CREDIT_NOTE_ISSUED: ("credit_note_id", "transaction_id"),

    EventTypes.SUPPLIER_CREATED: ("supplier_id", "name"),
    EventTypes.SUPPLIER_UPDATED: ("supplier_id", "changes"),
    EventTypes.PURCHASE_ORDER_CREATED: ("purchase_order_id", "po_number", "total_amount"),
    EventTypes.PURCHASE_ORDER_SENT: ("purchase_order_id", "transaction_id"),
    EventTypes.PURCHASE_ORDER_PAID: ("purchase_order_id", "amount", "transaction_id"),
    EventTypes.BILL_CREATED: ("bill_id", "bill_number", "total_amount"),
    EventTypes.BILL_RECORDED: ("bill_id", "transaction_id"),
    EventTypes.BILL_PAID: ("bill_id", "amount", "transaction_id"),

    EventTypes.ASSET_REGISTERED: ("asset_id", "cost", "purchase_date"),
    EventTypes.ASSET_DEPRECIATED: ("asset_id", "amount", "as_of"),
    EventTypes.ASSET_DISPOSED: ("asset_id", "proceeds", "gain_or_loss"),

    EventTypes.BUDGET_CREATED: ("budget_id", "account_id", "year", "month", "budgeted_amount"),
    EventTypes.BUDGET_UPDATED: ("budget_id", "changes"),
    EventTypes.BUDGET_DELETED: ("budget_id",),

    EventTypes.TRIAL_BALANCE_LINE_CREATED: ("line_id", "account_code"),
    EventTypes.TRIAL_BALANCE_LINE_UPDATED: ("line_id", "changes"),
    EventTypes.TRIAL_BALANCE_LINE_DELETED: ("line_id",),

    EventTypes.MESSAGE_SENT: ("message_id", "receiver_id"),
}


def validate_event_payload(event_type: str, data: Dict[str, Any]) -> None:
    """
    Validate a payload against the registry.

    Raises:
        ValueError: If event_type is not registered
        InvalidEventPayload: If required fields are missing
    """
    required = EVENT_REQUIRED_FIELDS.get(event_type)
    if required is None:
        raise ValueError(
            f"No schema registered for event type '{event_type}'. "
            f"Add it to EVENT_REQUIRED_FIELDS."
        )

    errors = [
        f"Missing required field: '{name}'"
        for name in required
        if name not in data
    ]
    if errors:
        raise InvalidEventPayload(event_type, errors)
