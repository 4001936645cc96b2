# sales/models.py
"""
Sales documents: customers, products, quotes, invoices, credit notes and
receipts.

Document totals are stored, not derived, so posted figures never move when
a product price changes. Status transitions and ledger postings happen in
sales/commands.py.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from accounts.models import Company
from accounting.models import BankAccount, DocumentLine, Transaction

ZERO = Decimal("0.00")


class Customer(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="customers")
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    vat_number = models.CharField(max_length=50, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["company", "name"])]

    def __str__(self):
        return self.name


class Product(models.Model):
    class ItemType(models.TextChoices):
        PRODUCT = "PRODUCT", "Product"
        SERVICE = "SERVICE", "Service"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="products")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    item_type = models.CharField(max_length=10, choices=ItemType.choices, default=ItemType.PRODUCT)
    unit_price = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    cost_price = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def is_stock_item(self) -> bool:
        return self.item_type == self.ItemType.PRODUCT


# =============================================================================
# Document bases
# =============================================================================

class SalesDocument(models.Model):
    """Totals and audit fields shared by quotes, invoices and credit notes."""

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    tax_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
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


# =============================================================================
# Quotes
# =============================================================================

class Quote(SalesDocument):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SENT = "SENT", "Sent"
        ACCEPTED = "ACCEPTED", "Accepted"
        DECLINED = "DECLINED", "Declined"
        CONVERTED = "CONVERTED", "Converted"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="quotes")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="quotes")
    quote_number = models.CharField(max_length=30)
    quote_date = models.DateField()
    expiry_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    converted_invoice = models.OneToOneField(
        "sales.Invoice",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="source_quote",
    )

    class Meta:
        ordering = ["-quote_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "quote_number"], name="uniq_quote_number_per_company"),
        ]

    def __str__(self):
        return self.quote_number


class QuoteItem(DocumentLine):
    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")


# =============================================================================
# Invoices
# =============================================================================

class Invoice(SalesDocument):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SENT = "SENT", "Sent"
        PARTIALLY_PAID = "PARTIALLY_PAID", "Partially paid"
        PAID = "PAID", "Paid"
        CANCELLED = "CANCELLED", "Cancelled"

    OPEN_STATUSES = (Status.SENT, Status.PARTIALLY_PAID)

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="invoices")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="invoices")
    invoice_number = models.CharField(max_length=30)
    invoice_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    amount_credited = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    posted_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="invoice",
    )
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "invoice_number"], name="uniq_invoice_number_per_company"),
        ]
        indexes = [models.Index(fields=["company", "status"])]

    def __str__(self):
        return self.invoice_number

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.amount_paid - self.amount_credited

    def is_overdue(self, today) -> bool:
        return (
            self.status in self.OPEN_STATUSES
            and self.due_date is not None
            and self.due_date < today
        )


class InvoiceItem(DocumentLine):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")


# =============================================================================
# Credit notes
# =============================================================================

class CreditNote(SalesDocument):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        ISSUED = "ISSUED", "Issued"
        CANCELLED = "CANCELLED", "Cancelled"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="credit_notes")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="credit_notes")
    invoice = models.ForeignKey(
        Invoice,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="credit_notes",
    )
    credit_note_number = models.CharField(max_length=30)
    credit_note_date = models.DateField()
    reason = models.CharField(max_length=500, blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    posted_transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="credit_note",
    )

    class Meta:
        ordering = ["-credit_note_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "credit_note_number"],
                name="uniq_credit_note_number_per_company",
            ),
        ]

    def __str__(self):
        return self.credit_note_number


class CreditNoteItem(DocumentLine):
    credit_note = models.ForeignKey(CreditNote, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")


# =============================================================================
# Receipts
# =============================================================================

class Receipt(models.Model):
    """Money received from a customer against an invoice."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="receipts")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="receipts")
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name="receipts")
    receipt_number = models.CharField(max_length=30)
    receipt_date = models.DateField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    bank_account = models.ForeignKey(BankAccount, on_delete=models.PROTECT, related_name="receipts")
    transaction = models.OneToOneField(
        Transaction,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="receipt",
    )
    reference = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-receipt_date", "-id"]

    def __str__(self):
        return f"{self.receipt_number} {self.amount}"
