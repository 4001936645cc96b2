# sales/urls.py
from django.urls import path

from . import views

app_name = "sales"

urlpatterns = [
    path("customers/", views.CustomerListCreateView.as_view(), name="customer-list"),
    path("customers/<int:pk>/", views.CustomerDetailView.as_view(), name="customer-detail"),
    path("customers/<int:pk>/statement/", views.CustomerStatementView.as_view(), name="customer-statement"),

    path("products/", views.ProductListCreateView.as_view(), name="product-list"),
    path("products/<int:pk>/", views.ProductDetailView.as_view(), name="product-detail"),

    path("invoices/", views.InvoiceListCreateView.as_view(), name="invoice-list"),
    path("invoices/<int:pk>/", views.InvoiceDetailView.as_view(), name="invoice-detail"),
    path("invoices/<int:pk>/send/", views.InvoiceSendView.as_view(), name="invoice-send"),
    path("invoices/<int:pk>/payments/", views.InvoicePaymentView.as_view(), name="invoice-payment"),
    path("invoices/<int:pk>/cancel/", views.InvoiceCancelView.as_view(), name="invoice-cancel"),

    path("quotes/", views.QuoteListCreateView.as_view(), name="quote-list"),
    path("quotes/<int:pk>/convert/", views.QuoteConvertView.as_view(), name="quote-convert"),
    path("quotes/<int:pk>/decline/", views.QuoteDeclineView.as_view(), name="quote-decline"),

    path("credit-notes/", views.CreditNoteListCreateView.as_view(), name="credit-note-list"),
    path("credit-notes/<int:pk>/issue/", views.CreditNoteIssueView.as_view(), name="credit-note-issue"),

    path("receipts/", views.ReceiptListView.as_view(), name="receipt-list"),
]
