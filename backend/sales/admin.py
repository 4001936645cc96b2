# sales/admin.py
"""Read-only admin for sales documents; changes go through sales/commands.py."""

from django.contrib import admin

from accounting.admin import ReadOnlyInline, ReadOnlyModelAdmin

from .models import CreditNote, CreditNoteItem, Customer, Invoice, InvoiceItem, Product, Quote, QuoteItem, Receipt


class InvoiceItemInline(ReadOnlyInline):
    model = InvoiceItem
    fields = ["line_no", "product", "description", "quantity", "unit_price", "tax_rate", "amount", "tax_amount"]
    readonly_fields = fields


class QuoteItemInline(InvoiceItemInline):
    model = QuoteItem


class CreditNoteItemInline(InvoiceItemInline):
    model = CreditNoteItem


@admin.register(Customer)
class CustomerAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "email", "phone", "is_active", "company"]
    list_filter = ["company", "is_active"]
    search_fields = ["name", "email", "vat_number"]


@admin.register(Product)
class ProductAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "item_type", "unit_price", "cost_price", "company"]
    list_filter = ["company", "item_type"]
    search_fields = ["name"]


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyModelAdmin):
    list_display = ["invoice_number", "customer", "invoice_date", "status", "total_amount", "amount_paid", "company"]
    list_filter = ["company", "status"]
    search_fields = ["invoice_number", "customer__name"]
    date_hierarchy = "invoice_date"
    inlines = [InvoiceItemInline]


@admin.register(Quote)
class QuoteAdmin(ReadOnlyModelAdmin):
    list_display = ["quote_number", "customer", "quote_date", "status", "total_amount", "company"]
    list_filter = ["company", "status"]
    inlines = [QuoteItemInline]


@admin.register(CreditNote)
class CreditNoteAdmin(ReadOnlyModelAdmin):
    list_display = ["credit_note_number", "customer", "credit_note_date", "status", "total_amount", "company"]
    list_filter = ["company", "status"]
    inlines = [CreditNoteItemInline]


@admin.register(Receipt)
class ReceiptAdmin(ReadOnlyModelAdmin):
    list_display = ["receipt_number", "customer", "invoice", "receipt_date", "amount", "company"]
    list_filter = ["company"]
