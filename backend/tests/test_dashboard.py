"""
Dashboard, health and failure handling tests.

Verifies:
- Dashboard stats aggregate today's sales, stock and open installments
- A database failure degrades the screen instead of failing it
- Unexpected errors answer with the recovery screen
"""

from sqlalchemy.exc import OperationalError

from ventas.extensions import db
from ventas.models import RolePermission
from ventas.services import dashboard_service


class TestDashboard:
    def test_stats(self, client, catalog, employee_headers):
        soda = catalog["soda"]
        client.post("/api/sales", json={"items": [{"product_id": soda.id, "quantity": 2}]},
                    headers=employee_headers)
        client.post("/api/sales", json={
            "items": [{"product_id": soda.id, "quantity": 1}],
            "payment_type": "installment",
            "customer_id": catalog["customer"].id,
            "initial_payment": 1000,
        }, headers=employee_headers)

        resp = client.get("/api/dashboard", headers=employee_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["degraded"] is False
        stats = body["stats"]
        assert stats["today_sales_total"] == 9000
        assert stats["today_sales_count"] == 2
        assert stats["total_products"] == 2
        assert stats["low_stock_products"] == 1
        assert stats["total_customers"] == 1
        assert stats["pending_installments_count"] == 1
        assert stats["pending_installments_balance"] == 2000
        assert len(stats["recent_sales"]) == 2

    def test_empty_store(self, client, cashier_headers):
        stats = client.get("/api/dashboard", headers=cashier_headers).get_json()["stats"]
        assert stats == dashboard_service.default_stats()

    def test_database_failure_degrades(self, client, cashier_headers, monkeypatch):
        def broken(**kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(dashboard_service, "get_dashboard_stats", broken)

        resp = client.get("/api/dashboard", headers=cashier_headers)

        assert resp.status_code == 200
        assert resp.get_json() == {"stats": dashboard_service.default_stats(), "degraded": True}


class TestRecovery:
    def test_unexpected_error_returns_recovery_screen(self, client, cashier_headers, monkeypatch):
        def broken(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(dashboard_service, "get_dashboard_stats", broken)

        resp = client.get("/api/dashboard", headers=cashier_headers)

        assert resp.status_code == 500
        body = resp.get_json()
        assert body["recovery"]["code"] == "UNEXPECTED_ERROR"
        assert [a["id"] for a in body["recovery"]["actions"]] == ["reload", "continue"]
        assert "boom" not in resp.get_data(as_text=True)

    def test_http_errors_keep_status(self, client):
        assert client.get("/api/does-not-exist").status_code == 404


class TestHealth:
    def test_healthy(self, client, users):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["details"]["users"] == 4

    def test_unseeded_permissions_degrade(self, app, client):
        db.session.query(RolePermission).delete()
        db.session.commit()

        body = client.get("/api/health").get_json()
        assert body["status"] == "degraded"
        assert body["checks"]["permissions"]["status"] == "degraded"
