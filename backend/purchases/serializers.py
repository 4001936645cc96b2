# purchases/serializers.py
from rest_framework import serializers

from .models import Bill, BillItem, PurchaseOrder, PurchaseOrderItem, Supplier, SupplierPayment

LINE_FIELDS = ["id", "line_no", "description", "quantity", "unit_price", "tax_rate", "amount", "tax_amount"]


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            "id", "name", "contact_person", "email", "phone", "address",
            "vat_number", "is_active", "created_at",
        ]
        read_only_fields = fields


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseOrderItem
        fields = LINE_FIELDS
        read_only_fields = fields


class BillItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = BillItem
        fields = LINE_FIELDS
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    balance_due = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "id", "po_number", "supplier", "supplier_name", "order_date", "due_date",
            "status", "subtotal", "tax_amount", "total_amount", "amount_paid",
            "balance_due", "notes", "posted_transaction", "created_at", "items",
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    balance_due = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    items = BillItemSerializer(many=True, read_only=True)

    class Meta:
        model = Bill
        fields = [
            "id", "bill_number", "supplier_reference", "supplier", "supplier_name",
            "bill_date", "due_date", "status", "expense_account", "subtotal",
            "tax_amount", "total_amount", "amount_paid", "balance_due", "notes",
            "posted_transaction", "created_at", "items",
        ]
        read_only_fields = fields


class SupplierPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = SupplierPayment
        fields = [
            "id", "payment_number", "supplier", "purchase_order", "bill",
            "payment_date", "amount", "bank_account", "transaction", "reference",
        ]
        read_only_fields = fields


class SupplierInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    vat_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class PurchaseLineInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500)
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, default=1)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2)
    tax_rate = serializers.DecimalField(max_digits=6, decimal_places=2, required=False, allow_null=True)


class PurchaseOrderInputSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    order_date = serializers.DateField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseLineInputSerializer(many=True)


class BillInputSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    bill_date = serializers.DateField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    supplier_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    expense_account_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseLineInputSerializer(many=True)


class PostDateSerializer(serializers.Serializer):
    post_date = serializers.DateField(required=False, allow_null=True, default=None)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    payment_date = serializers.DateField()
    bank_account_id = serializers.IntegerField()
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
