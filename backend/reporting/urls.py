# reporting/urls.py
from django.urls import path

from . import views

app_name = "reporting"

urlpatterns = [
    path("trial-balance/", views.TrialBalanceView.as_view(), name="trial-balance"),
    path("trial-balance/lines/", views.TrialBalanceLineListCreateView.as_view(), name="tb-line-list"),
    path("trial-balance/lines/summary/", views.TrialBalanceLineSummaryView.as_view(), name="tb-line-summary"),
    path("trial-balance/lines/<int:pk>/", views.TrialBalanceLineDetailView.as_view(), name="tb-line-detail"),
    path("income-statement/", views.IncomeStatementView.as_view(), name="income-statement"),
    path("metrics/", views.FinancialMetricsView.as_view(), name="metrics"),
]
