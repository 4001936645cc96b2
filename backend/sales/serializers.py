# sales/serializers.py
"""Input validation and output formatting for sales documents."""

from rest_framework import serializers

from .models import (
    CreditNote,
    CreditNoteItem,
    Customer,
    Invoice,
    InvoiceItem,
    Product,
    Quote,
    QuoteItem,
    Receipt,
)

LINE_FIELDS = [
    "id", "line_no", "product", "description", "quantity",
    "unit_price", "tax_rate", "amount", "tax_amount",
]


# =============================================================================
# Output
# =============================================================================

class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id", "name", "email", "phone", "address", "vat_number",
            "notes", "is_active", "created_at",
        ]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "description", "item_type", "unit_price", "cost_price", "is_active"]
        read_only_fields = fields


class InvoiceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceItem
        fields = LINE_FIELDS
        read_only_fields = fields


class QuoteItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuoteItem
        fields = LINE_FIELDS
        read_only_fields = fields


class CreditNoteItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CreditNoteItem
        fields = LINE_FIELDS
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    balance_due = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id", "invoice_number", "customer", "customer_name", "invoice_date",
            "due_date", "status", "subtotal", "tax_amount", "total_amount",
            "amount_paid", "amount_credited", "balance_due", "notes", "posted_transaction",
            "sent_at", "created_at", "items",
        ]
        read_only_fields = fields


class QuoteSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = QuoteItemSerializer(many=True, read_only=True)

    class Meta:
        model = Quote
        fields = [
            "id", "quote_number", "customer", "customer_name", "quote_date",
            "expiry_date", "status", "subtotal", "tax_amount", "total_amount",
            "notes", "converted_invoice", "created_at", "items",
        ]
        read_only_fields = fields


class CreditNoteSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    items = CreditNoteItemSerializer(many=True, read_only=True)

    class Meta:
        model = CreditNote
        fields = [
            "id", "credit_note_number", "customer", "customer_name", "invoice",
            "credit_note_date", "reason", "status", "subtotal", "tax_amount",
            "total_amount", "posted_transaction", "created_at", "items",
        ]
        read_only_fields = fields


class ReceiptSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = Receipt
        fields = [
            "id", "receipt_number", "customer", "invoice", "invoice_number",
            "receipt_date", "amount", "bank_account", "transaction", "reference",
        ]
        read_only_fields = fields


# =============================================================================
# Input
# =============================================================================

class CustomerInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    vat_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class ProductInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    item_type = serializers.ChoiceField(choices=Product.ItemType.choices, default=Product.ItemType.PRODUCT)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    cost_price = serializers.DecimalField(
        max_digits=18, decimal_places=2, min_value=0, required=False, allow_null=True, default=None,
    )


class LineItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, default=1)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, allow_null=True)
    tax_rate = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)


class InvoiceInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    invoice_date = serializers.DateField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True)


class InvoiceUpdateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField(required=False)
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    items = LineItemInputSerializer(many=True, required=False)


class QuoteInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    quote_date = serializers.DateField()
    expiry_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True)


class QuoteConvertSerializer(serializers.Serializer):
    invoice_date = serializers.DateField(required=False, allow_null=True, default=None)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class CreditNoteInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    invoice_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    credit_note_date = serializers.DateField()
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    items = LineItemInputSerializer(many=True)


class PostDateSerializer(serializers.Serializer):
    post_date = serializers.DateField(required=False, allow_null=True, default=None)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    payment_date = serializers.DateField()
    bank_account_id = serializers.IntegerField()
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class CancelInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
