# tax/urls.py
from django.urls import path

from . import views

app_name = "tax"

urlpatterns = [
    path("vat201/", views.Vat201View.as_view(), name="vat201"),
    path("vat/annual/", views.AnnualVatView.as_view(), name="vat-annual"),
    path("vat/purchases/", views.PurchaseVatView.as_view(), name="vat-purchases"),
    path("vat/split/", views.VatSplitView.as_view(), name="vat-split"),
    path("income-tax/", views.IncomeTaxView.as_view(), name="income-tax"),
    path("paye/", views.PayeView.as_view(), name="paye"),
]
