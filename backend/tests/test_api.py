# tests/test_api.py
"""Endpoint smoke tests through the DRF test client."""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient


def _dec(value):
    return Decimal(str(value))


@pytest.fixture
def viewer_client(viewer):
    client = APIClient()
    client.force_authenticate(user=viewer.user)
    return client


@pytest.mark.django_db
class TestAuth:
    def test_token_login(self, user):
        response = APIClient().post(
            "/api/auth/token/", {"email": "owner@example.com", "password": "pass1234"}, format="json",
        )

        assert response.status_code == 200
        assert {"access", "refresh"} <= set(response.json())

    def test_bad_credentials(self, user):
        response = APIClient().post(
            "/api/auth/token/", {"email": "owner@example.com", "password": "wrong"}, format="json",
        )
        assert response.status_code == 401

    def test_anonymous_is_rejected(self, db):
        assert APIClient().get("/api/sales/invoices/").status_code == 401

    def test_health_needs_no_auth(self, db):
        assert APIClient().get("/_health/live").status_code == 200
        assert APIClient().get("/_health/ready").status_code == 200


@pytest.mark.django_db
class TestSalesFlow:
    def test_invoice_lifecycle(self, api_client, bank_account):
        customer = api_client.post("/api/sales/customers/", {"name": "Acme Holdings"}, format="json").json()

        created = api_client.post(
            "/api/sales/invoices/",
            {
                "customer_id": customer["id"],
                "invoice_date": "2025-04-10",
                "items": [{"description": "Consulting", "quantity": "2", "unit_price": "500.00"}],
            },
            format="json",
        )
        assert created.status_code == 201, created.content
        invoice = created.json()
        assert invoice["total_amount"] == "1150.00"
        assert invoice["status"] == "DRAFT"

        sent = api_client.post(f"/api/sales/invoices/{invoice['id']}/send/", {}, format="json")
        assert sent.status_code == 200
        assert sent.json()["status"] == "SENT"

        paid = api_client.post(
            f"/api/sales/invoices/{invoice['id']}/payments/",
            {"amount": "1150.00", "payment_date": "2025-04-20", "bank_account_id": bank_account.id},
            format="json",
        )
        assert paid.status_code == 201
        assert paid.json()["invoice"]["status"] == "PAID"

    def test_command_failure_is_400(self, api_client):
        customer = api_client.post("/api/sales/customers/", {"name": "Acme"}, format="json").json()
        response = api_client.post(
            "/api/sales/invoices/",
            {"customer_id": customer["id"], "invoice_date": "2025-04-10", "items": []},
            format="json",
        )

        assert response.status_code == 400
        assert "detail" in response.json()

    def test_statement_csv(self, api_client):
        customer = api_client.post("/api/sales/customers/", {"name": "Acme"}, format="json").json()

        response = api_client.get(
            f"/api/sales/customers/{customer['id']}/statement/",
            {"start": "2025-04-01", "end": "2025-04-30", "export": "csv"},
        )

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/csv")
        assert response.content.decode().splitlines()[0].startswith("Date,Type,Reference")


@pytest.mark.django_db
class TestViewerAccess:
    def test_can_read(self, viewer_client):
        assert viewer_client.get("/api/sales/invoices/").status_code == 200
        assert viewer_client.get("/api/reports/trial-balance/", {"year": 2025, "month": 4}).status_code == 200

    def test_cannot_write(self, viewer_client):
        response = viewer_client.post("/api/sales/customers/", {"name": "Blocked"}, format="json")
        assert response.status_code == 403

    def test_cannot_export_or_see_tax(self, viewer_client):
        response = viewer_client.get(
            "/api/reports/trial-balance/", {"year": 2025, "month": 4, "export": "csv"},
        )
        assert response.status_code == 403
        assert viewer_client.get("/api/tax/vat201/").status_code == 403


@pytest.mark.django_db
class TestReportsAndTax:
    def test_monthly_trial_balance_needs_month(self, api_client):
        assert api_client.get("/api/reports/trial-balance/", {"year": 2025}).status_code == 400

    def test_trial_balance_csv(self, api_client):
        response = api_client.get(
            "/api/reports/trial-balance/", {"period_type": "annual", "year": 2025, "export": "csv"},
        )

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/csv")

    def test_paye(self, api_client):
        response = api_client.post(
            "/api/tax/paye/",
            {"gross": "300000", "period_start": "2024-03-01", "period_end": "2025-02-28"},
            format="json",
        )

        assert response.status_code == 200
        assert _dec(response.json()["paye"]) == Decimal("41797.00")

    def test_income_tax_with_explicit_profit(self, api_client):
        response = api_client.post(
            "/api/tax/income-tax/",
            {"profit_before_tax": "100000.00", "rate": "27"},
            format="json",
        )

        assert response.status_code == 200
        assert _dec(response.json()["current_tax"]) == Decimal("27000.00")

    def test_vat_split_uses_company_rate(self, api_client):
        response = api_client.post("/api/tax/vat/split/", {"amount": "115.00"}, format="json")

        assert response.status_code == 200
        body = response.json()
        assert _dec(body["net"]) == Decimal("100.00")
        assert _dec(body["vat"]) == Decimal("15.00")


@pytest.mark.django_db
class TestAssetsBudgetsMessages:
    def test_register_and_summary(self, api_client, bank_account):
        response = api_client.post(
            "/api/assets/",
            {
                "description": "Delivery van",
                "cost": "6000.00",
                "purchase_date": "2025-04-01",
                "useful_life_years": "5",
                "bank_account_id": bank_account.id,
            },
            format="json",
        )
        assert response.status_code == 201, response.content

        detail = api_client.get(f"/api/assets/{response.json()['id']}/")
        assert detail.status_code == 200
        assert detail.json()["schedule"]

    def test_bank_funding_without_bank_is_invalid(self, api_client):
        response = api_client.post(
            "/api/assets/",
            {"description": "Van", "cost": "6000.00", "purchase_date": "2025-04-01", "useful_life_years": "5"},
            format="json",
        )
        assert response.status_code == 400

    def test_budget_duplicate_is_400(self, api_client, account):
        payload = {"account_id": account("6000").id, "year": 2025, "month": 4, "budgeted_amount": "1000.00"}

        assert api_client.post("/api/budgets/", payload, format="json").status_code == 201
        duplicate = api_client.post("/api/budgets/", payload, format="json")
        assert duplicate.status_code == 400

    def test_messages_roundtrip(self, api_client, make_member):
        clerk = make_member("clerk@example.com", name="Clerk")

        sent = api_client.post("/api/messages/", {"receiver_id": clerk.id, "content": "Hi"}, format="json")
        assert sent.status_code == 201

        thread = api_client.get(f"/api/messages/with/{clerk.id}/")
        assert [m["content"] for m in thread.json()] == ["Hi"]
        assert api_client.get("/api/messages/unread/").json() == {"unread": 0}
