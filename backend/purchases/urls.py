# purchases/urls.py
from django.urls import path

from . import views

app_name = "purchases"

urlpatterns = [
    path("suppliers/", views.SupplierListCreateView.as_view(), name="supplier-list"),
    path("suppliers/<int:pk>/", views.SupplierDetailView.as_view(), name="supplier-detail"),
    path("suppliers/<int:pk>/statement/", views.SupplierStatementView.as_view(), name="supplier-statement"),

    path("purchase-orders/", views.PurchaseOrderListCreateView.as_view(), name="purchase-order-list"),
    path("purchase-orders/<int:pk>/", views.PurchaseOrderDetailView.as_view(), name="purchase-order-detail"),
    path("purchase-orders/<int:pk>/send/", views.PurchaseOrderSendView.as_view(), name="purchase-order-send"),
    path("purchase-orders/<int:pk>/payments/", views.PurchaseOrderPaymentView.as_view(), name="purchase-order-payment"),

    path("bills/", views.BillListCreateView.as_view(), name="bill-list"),
    path("bills/<int:pk>/record/", views.BillRecordView.as_view(), name="bill-record"),
    path("bills/<int:pk>/payments/", views.BillPaymentView.as_view(), name="bill-payment"),

    path("payments/", views.SupplierPaymentListView.as_view(), name="payment-list"),
]
