from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/events/", include("events.urls")),
    path("api/accounting/", include("accounting.urls")),
    path("api/sales/", include("sales.urls")),
    path("api/purchases/", include("purchases.urls")),
    path("api/tax/", include("tax.urls")),
    path("api/assets/", include("assets.urls")),
    path("api/budgets/", include("budgeting.urls")),
    path("api/reports/", include("reporting.urls")),
    path("api/messages/", include("messaging.urls")),
]
