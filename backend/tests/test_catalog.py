"""
Catalog tests: products, categories, customers and suppliers.

Verifies:
- CRUD through the API with view_/manage_ permissions
- Payload allowlist and type validation
- Barcode and cédula uniqueness
- Deleting a category keeps its products
"""

import pytest

from ventas.extensions import db
from ventas.models import Product


class TestProducts:
    def test_list_and_search(self, client, catalog, cashier_headers):
        body = client.get("/api/products", headers=cashier_headers).get_json()
        assert [p["name"] for p in body["items"]] == ["Gaseosa", "Papas"]
        assert body["items"][0]["category"]["name"] == "Bebidas"

        body = client.get("/api/products?search=7700002", headers=cashier_headers).get_json()
        assert [p["name"] for p in body["items"]] == ["Papas"]

        body = client.get("/api/products?search=GASEO", headers=cashier_headers).get_json()
        assert [p["name"] for p in body["items"]] == ["Gaseosa"]

    def test_low_stock_filter(self, client, catalog, cashier_headers):
        body = client.get("/api/products?low_stock=1", headers=cashier_headers).get_json()
        assert [p["name"] for p in body["items"]] == ["Papas"]

    def test_create(self, client, catalog, manager_headers):
        resp = client.post("/api/products", json={
            "name": "Agua", "sale_price": 1500, "stock": 24, "category_id": catalog["category"].id,
        }, headers=manager_headers)

        assert resp.status_code == 201
        product = resp.get_json()
        assert product["purchase_price"] == 0
        assert product["barcode"] is None
        assert product["category"]["name"] == "Bebidas"

    def test_update(self, client, catalog, manager_headers):
        soda = catalog["soda"]
        resp = client.put(f"/api/products/{soda.id}", json={"sale_price": 3500}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["sale_price"] == 3500
        assert resp.get_json()["stock"] == 10

    def test_barcode_conflict(self, client, catalog, manager_headers):
        resp = client.post("/api/products", json={"name": "Copia", "sale_price": 1, "barcode": "7700001"},
                           headers=manager_headers)
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Ya existe un producto con este código de barras"

    def test_keeping_own_barcode_is_fine(self, client, catalog, manager_headers):
        soda = catalog["soda"]
        resp = client.put(f"/api/products/{soda.id}", json={"barcode": "7700001"}, headers=manager_headers)
        assert resp.status_code == 200

    @pytest.mark.parametrize(
        "payload",
        [
            {"sale_price": 1000},
            {"name": "X", "sale_price": "mil"},
            {"name": "X", "sale_price": -1},
            {"name": "X", "sale_price": 1, "stock": -5},
            {"name": "", "sale_price": 1},
            {"name": "X", "sale_price": 1, "margin": 10},
            {"name": "X", "sale_price": 1, "id": 99},
        ],
    )
    def test_invalid_payloads(self, client, catalog, manager_headers, payload):
        resp = client.post("/api/products", json=payload, headers=manager_headers)
        assert resp.status_code == 400

    def test_unknown_category(self, client, catalog, manager_headers):
        resp = client.post("/api/products", json={"name": "X", "sale_price": 1, "category_id": 999},
                           headers=manager_headers)
        assert resp.status_code == 404

    def test_delete(self, client, catalog, manager_headers):
        chips = catalog["chips"]
        assert client.delete(f"/api/products/{chips.id}", headers=manager_headers).status_code == 200
        assert client.get(f"/api/products/{chips.id}", headers=manager_headers).status_code == 404

    def test_sold_product_cannot_be_deleted(self, client, catalog, manager_headers):
        soda = catalog["soda"]
        client.post("/api/sales", json={"items": [{"product_id": soda.id, "quantity": 1}]},
                    headers=manager_headers)

        resp = client.delete(f"/api/products/{soda.id}", headers=manager_headers)
        assert resp.status_code == 409

    def test_employee_can_view_but_not_edit(self, client, catalog, employee_headers):
        soda = catalog["soda"]
        assert client.get(f"/api/products/{soda.id}", headers=employee_headers).status_code == 200
        resp = client.put(f"/api/products/{soda.id}", json={"stock": 0}, headers=employee_headers)
        assert resp.status_code == 403


class TestCategories:
    def test_crud(self, client, manager_headers):
        resp = client.post("/api/categories", json={"name": "Snacks"}, headers=manager_headers)
        assert resp.status_code == 201
        category_id = resp.get_json()["id"]

        resp = client.put(f"/api/categories/{category_id}", json={"description": "Paquetes"},
                          headers=manager_headers)
        assert resp.get_json()["description"] == "Paquetes"

        names = [c["name"] for c in client.get("/api/categories", headers=manager_headers).get_json()["items"]]
        assert names == ["Snacks"]

    def test_duplicate_name(self, client, catalog, manager_headers):
        resp = client.post("/api/categories", json={"name": "Bebidas"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_delete_keeps_products(self, client, catalog, manager_headers):
        category = catalog["category"]
        soda_id = catalog["soda"].id

        assert client.delete(f"/api/categories/{category.id}", headers=manager_headers).status_code == 200

        product = db.session.get(Product, soda_id)
        assert product is not None
        assert product.category_id is None


class TestCustomers:
    def test_crud_and_search(self, client, catalog, cashier_headers, manager_headers):
        resp = client.post("/api/customers", json={"name": "Pedro Gómez", "cedula": "998877"},
                           headers=manager_headers)
        assert resp.status_code == 201

        body = client.get("/api/customers?search=1020", headers=cashier_headers).get_json()
        assert [c["name"] for c in body["items"]] == ["Ana Pérez"]

        body = client.get("/api/customers?search=pedro", headers=cashier_headers).get_json()
        assert [c["cedula"] for c in body["items"]] == ["998877"]

    def test_duplicate_cedula(self, client, catalog, manager_headers):
        resp = client.post("/api/customers", json={"name": "Otra Ana", "cedula": "1020304050"},
                           headers=manager_headers)
        assert resp.status_code == 409

    def test_customer_with_sales_cannot_be_deleted(self, client, catalog, employee_headers, manager_headers):
        customer = catalog["customer"]
        client.post("/api/sales", json={
            "items": [{"product_id": catalog["soda"].id, "quantity": 1}],
            "payment_type": "installment",
            "customer_id": customer.id,
        }, headers=employee_headers)

        resp = client.delete(f"/api/customers/{customer.id}", headers=manager_headers)
        assert resp.status_code == 409


class TestSuppliers:
    def test_crud(self, client, manager_headers):
        resp = client.post("/api/suppliers", json={"name": "Distribuidora Sol", "phone": "3100000000"},
                           headers=manager_headers)
        assert resp.status_code == 201
        supplier_id = resp.get_json()["id"]

        resp = client.put(f"/api/suppliers/{supplier_id}", json={"contact_person": "Marta"},
                          headers=manager_headers)
        assert resp.get_json()["contact_person"] == "Marta"

        assert client.delete(f"/api/suppliers/{supplier_id}", headers=manager_headers).status_code == 200
        assert client.get("/api/suppliers", headers=manager_headers).get_json()["items"] == []

    def test_name_required(self, client, manager_headers):
        resp = client.post("/api/suppliers", json={"phone": "1"}, headers=manager_headers)
        assert resp.status_code == 400
