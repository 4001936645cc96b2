# budgeting/urls.py
from django.urls import path

from . import views

app_name = "budgeting"

urlpatterns = [
    path("", views.BudgetListCreateView.as_view(), name="budget-list"),
    path("annual/", views.AnnualBudgetReportView.as_view(), name="budget-annual"),
    path("<int:pk>/", views.BudgetDetailView.as_view(), name="budget-detail"),
]
