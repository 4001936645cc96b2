# assets/urls.py
from django.urls import path

from . import views

app_name = "assets"

urlpatterns = [
    path("", views.AssetListCreateView.as_view(), name="asset-list"),
    path("summary/", views.PPESummaryView.as_view(), name="ppe-summary"),
    path("depreciation/run/", views.DepreciationRunView.as_view(), name="depreciation-run"),
    path("<int:pk>/", views.AssetDetailView.as_view(), name="asset-detail"),
    path("<int:pk>/dispose/", views.AssetDisposeView.as_view(), name="asset-dispose"),
]
