# accounting/urls.py
from django.urls import path

from .views import (
    AccountDetailView,
    AccountListCreateView,
    BankAccountListCreateView,
    TransactionDetailView,
    TransactionListCreateView,
    TransactionReverseView,
)

app_name = "accounting"

urlpatterns = [
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="account-list"),
    path("accounts/<str:code>/", AccountDetailView.as_view(), name="account-detail"),

    # Banking
    path("bank-accounts/", BankAccountListCreateView.as_view(), name="bank-account-list"),

    # Transactions / journals
    path("transactions/", TransactionListCreateView.as_view(), name="transaction-list"),
    path("transactions/<int:pk>/", TransactionDetailView.as_view(), name="transaction-detail"),
    path("transactions/<int:pk>/reverse/", TransactionReverseView.as_view(), name="transaction-reverse"),
]
