# purchases/models.py
"""
Purchasing documents: suppliers, purchase orders, supplier bills and
payments made to suppliers.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from accounts.models import Company
from accounting.models import Account, BankAccount, DocumentLine, Transaction

ZERO = Decimal("0.00")


class Supplier(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="suppliers")
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    vat_number = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class PayableDocument(models.Model):
    """Totals, payment tracking and audit fields for POs and bills."""

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    tax_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.amount_paid


class PurchaseOrder(PayableDocument):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SENT = "SENT", "Sent"
        PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
        PAID = "PAID", "Paid"
        CANCELLED = "CANCELLED", "Cancelled"

    OPEN_STATUSES = (Status.SENT, Status.PARTIALLY_PAID)
    POSTED_STATUSES = (Status.SENT, Status.PARTIALLY_PAID, Status.PAID)

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="purchase_orders")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchase_orders")
    po_number = models.CharField(max_length=30)
    order_date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    posted_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="purchase_order",
    )

    class Meta:
        ordering = ["-order_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "po_number"], name="uniq_po_number_per_company"),
        ]

    def __str__(self):
        return self.po_number


class PurchaseOrderItem(DocumentLine):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")


class Bill(PayableDocument):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        RECORDED = "RECORDED", "Recorded"
        PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
        PAID = "PAID", "Paid"

    OPEN_STATUSES = (Status.RECORDED, Status.PARTIALLY_PAID)
    POSTED_STATUSES = (Status.RECORDED, Status.PARTIALLY_PAID, Status.PAID)

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="bills")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="bills")
    bill_number = models.CharField(max_length=30)
    supplier_reference = models.CharField(max_length=100, blank=True, default="")
    bill_date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    expense_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
        help_text="Debit side of the posting (defaults to 6000 Operating Expenses)",
    )
    posted_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="bill",
    )

    class Meta:
        ordering = ["-bill_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "bill_number"], name="uniq_bill_number_per_company"),
        ]

    def __str__(self):
        return self.bill_number


class BillItem(DocumentLine):
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="items")


class SupplierPayment(models.Model):
    """Money paid to a supplier against a purchase order or a bill."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="supplier_payments")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="payments")
    purchase_order = models.ForeignKey(
        PurchaseOrder, null=True, blank=True, on_delete=models.PROTECT, related_name="payments",
    )
    bill = models.ForeignKey(Bill, null=True, blank=True, on_delete=models.PROTECT, related_name="payments")
    payment_number = models.CharField(max_length=30)
    payment_date = models.DateField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    bank_account = models.ForeignKey(BankAccount, on_delete=models.PROTECT, related_name="supplier_payments")
    transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="supplier_payment",
    )
    reference = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]

    def __str__(self):
        return f"{self.payment_number} {self.amount}"

    @property
    def document_number(self) -> str:
        if self.purchase_order_id:
            return self.purchase_order.po_number
        if self.bill_id:
            return self.bill.bill_number
        return ""
