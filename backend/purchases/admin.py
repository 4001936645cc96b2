# purchases/admin.py
from django.contrib import admin

from accounting.admin import ReadOnlyInline, ReadOnlyModelAdmin

from .models import Bill, BillItem, PurchaseOrder, PurchaseOrderItem, Supplier, SupplierPayment


class PurchaseOrderItemInline(ReadOnlyInline):
    model = PurchaseOrderItem
    fields = ["line_no", "description", "quantity", "unit_price", "tax_rate", "amount", "tax_amount"]
    readonly_fields = fields


class BillItemInline(PurchaseOrderItemInline):
    model = BillItem


@admin.register(Supplier)
class SupplierAdmin(ReadOnlyModelAdmin):
    list_display = ["name", "contact_person", "email", "is_active", "company"]
    list_filter = ["company", "is_active"]
    search_fields = ["name", "email", "vat_number"]


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(ReadOnlyModelAdmin):
    list_display = ["po_number", "supplier", "order_date", "status", "total_amount", "amount_paid", "company"]
    list_filter = ["company", "status"]
    inlines = [PurchaseOrderItemInline]


@admin.register(Bill)
class BillAdmin(ReadOnlyModelAdmin):
    list_display = ["bill_number", "supplier", "bill_date", "status", "total_amount", "amount_paid", "company"]
    list_filter = ["company", "status"]
    inlines = [BillItemInline]


@admin.register(SupplierPayment)
class SupplierPaymentAdmin(ReadOnlyModelAdmin):
    list_display = ["payment_number", "supplier", "payment_date", "amount", "company"]
    list_filter = ["company"]
