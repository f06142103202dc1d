"""
Sales and abono tests.

Verifies:
- Stock decrements and prices come from the product
- Insufficient stock rejects the whole sale with per-product details
- Installment sales require a customer and move pending -> partial -> paid
- An abono can never exceed the remaining balance
- Receipts render for sales and abonos
"""

from ventas.extensions import db
from ventas.models import Product, Sale


def post_sale(client, headers, **body):
    return client.post("/api/sales", json=body, headers=headers)


# =============================================================================
# CASH SALES
# =============================================================================


class TestCashSale:
    def test_decrements_stock(self, client, catalog, cashier_headers):
        soda = catalog["soda"]

        resp = post_sale(client, cashier_headers, items=[{"product_id": soda.id, "quantity": 2}],
                         amount_received=10000)

        assert resp.status_code == 201
        sale = resp.get_json()
        assert sale["subtotal"] == 6000
        assert sale["total_amount"] == 6000
        assert sale["payment_status"] == "paid"
        assert sale["sale_items"][0]["unit_price"] == 3000
        assert db.session.get(Product, soda.id).stock == 8

    def test_client_price_is_ignored(self, client, catalog, cashier_headers):
        soda = catalog["soda"]
        resp = post_sale(client, cashier_headers,
                         items=[{"product_id": soda.id, "quantity": 1, "unit_price": 1}])
        assert resp.get_json()["total_amount"] == 3000

    def test_repeated_lines_are_merged(self, client, catalog, cashier_headers):
        chips = catalog["chips"]
        resp = post_sale(client, cashier_headers, items=[
            {"product_id": chips.id, "quantity": 2},
            {"product_id": chips.id, "quantity": 2},
        ])
        assert resp.status_code == 400
        assert resp.get_json()["details"]["items"][0]["requested_quantity"] == 4

    def test_insufficient_stock_writes_nothing(self, client, catalog, cashier_headers):
        soda, chips = catalog["soda"], catalog["chips"]

        resp = post_sale(client, cashier_headers, items=[
            {"product_id": soda.id, "quantity": 1},
            {"product_id": chips.id, "quantity": 5},
        ])

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "Stock insuficiente"
        assert body["details"]["items"] == [
            {"product_id": chips.id, "name": "Papas", "requested_quantity": 5, "stock": 3},
        ]
        assert db.session.get(Product, soda.id).stock == 10
        assert db.session.query(Sale).count() == 0

    def test_discount(self, client, catalog, cashier_headers):
        resp = post_sale(client, cashier_headers, items=[{"product_id": catalog["soda"].id, "quantity": 3}],
                         discount_amount=1000)
        assert resp.get_json()["total_amount"] == 8000

    def test_discount_above_subtotal(self, client, catalog, cashier_headers):
        resp = post_sale(client, cashier_headers, items=[{"product_id": catalog["soda"].id, "quantity": 1}],
                         discount_amount=5000)
        assert resp.status_code == 400

    def test_short_payment(self, client, catalog, cashier_headers):
        resp = post_sale(client, cashier_headers, items=[{"product_id": catalog["soda"].id, "quantity": 1}],
                         amount_received=2000)
        assert resp.status_code == 400

    def test_empty_cart(self, client, catalog, cashier_headers):
        assert post_sale(client, cashier_headers, items=[]).status_code == 400

    def test_unknown_product(self, client, catalog, cashier_headers):
        resp = post_sale(client, cashier_headers, items=[{"product_id": 999, "quantity": 1}])
        assert resp.status_code == 404

    def test_bad_quantity(self, client, catalog, cashier_headers):
        resp = post_sale(client, cashier_headers, items=[{"product_id": catalog["soda"].id, "quantity": 0}])
        assert resp.status_code == 400


# =============================================================================
# INSTALLMENTS
# =============================================================================


def installment_sale(client, headers, catalog, initial_payment=0):
    resp = post_sale(
        client, headers,
        items=[{"product_id": catalog["soda"].id, "quantity": 5}],
        payment_type="installment",
        customer_id=catalog["customer"].id,
        initial_payment=initial_payment,
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


class TestInstallments:
    def test_requires_customer(self, client, catalog, employee_headers):
        resp = post_sale(client, employee_headers, items=[{"product_id": catalog["soda"].id, "quantity": 1}],
                         payment_type="installment")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Las ventas por abonos requieren un cliente"

    def test_status_transitions(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog)
        assert sale["payment_status"] == "pending"
        assert sale["remaining_balance"] == 15000

        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 5000},
                           headers=employee_headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["paid_before"] == 0
        assert body["sale"]["payment_status"] == "partial"

        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 10000},
                           headers=employee_headers)
        assert resp.get_json()["paid_before"] == 5000
        assert resp.get_json()["sale"]["payment_status"] == "paid"
        assert resp.get_json()["sale"]["remaining_balance"] == 0

    def test_initial_payment(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog, initial_payment=4000)
        assert sale["payment_status"] == "partial"
        assert sale["total_paid"] == 4000
        assert sale["payments"][0]["notes"] == "Abono inicial"

    def test_abono_cannot_exceed_balance(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog, initial_payment=10000)

        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 6000},
                           headers=employee_headers)

        assert resp.status_code == 400
        assert resp.get_json()["details"] == {"remaining_balance": 5000, "amount": 6000}
        assert db.session.get(Sale, sale["id"]).total_paid == 10000

    def test_paid_sale_rejects_abono(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog, initial_payment=15000)
        assert sale["payment_status"] == "paid"

        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 1},
                           headers=employee_headers)
        assert resp.status_code == 400

    def test_zero_abono_rejected(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog)
        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 0},
                           headers=employee_headers)
        assert resp.status_code == 400

    def test_abono_on_cash_sale_rejected(self, client, catalog, employee_headers):
        sale = post_sale(client, employee_headers,
                         items=[{"product_id": catalog["soda"].id, "quantity": 1}]).get_json()
        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 100},
                           headers=employee_headers)
        assert resp.status_code == 400

    def test_listing_and_payments(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog, initial_payment=4000)
        post_sale(client, employee_headers, items=[{"product_id": catalog["chips"].id, "quantity": 1}])

        items = client.get("/api/installments", headers=employee_headers).get_json()["items"]
        assert [s["id"] for s in items] == [sale["id"]]

        resp = client.get(f"/api/installments/{sale['id']}/payments", headers=employee_headers)
        body = resp.get_json()
        assert body["remaining_balance"] == 11000
        assert len(body["payments"]) == 1


# =============================================================================
# LISTING AND DELETION
# =============================================================================


class TestSalesHistory:
    def test_list_filters(self, client, catalog, manager_headers):
        post_sale(client, manager_headers, items=[{"product_id": catalog["soda"].id, "quantity": 1}])
        installment_sale(client, manager_headers, catalog)

        all_sales = client.get("/api/sales", headers=manager_headers).get_json()
        assert len(all_sales["items"]) == 2
        assert all_sales["degraded"] is False
        assert "sale_items" not in all_sales["items"][0]

        cash = client.get("/api/sales?payment_type=cash", headers=manager_headers).get_json()
        assert [s["payment_type"] for s in cash["items"]] == ["cash"]

    def test_delete_restores_stock(self, client, catalog, manager_headers):
        sale = post_sale(client, manager_headers,
                         items=[{"product_id": catalog["soda"].id, "quantity": 4}]).get_json()
        assert db.session.get(Product, catalog["soda"].id).stock == 6

        assert client.delete(f"/api/sales/{sale['id']}", headers=manager_headers).status_code == 200
        assert db.session.get(Product, catalog["soda"].id).stock == 10
        assert client.get(f"/api/sales/{sale['id']}", headers=manager_headers).status_code == 404

    def test_delete_without_restock(self, client, catalog, manager_headers):
        sale = post_sale(client, manager_headers,
                         items=[{"product_id": catalog["soda"].id, "quantity": 4}]).get_json()
        client.delete(f"/api/sales/{sale['id']}?restore_stock=false", headers=manager_headers)
        assert db.session.get(Product, catalog["soda"].id).stock == 6

    def test_employee_cannot_delete(self, client, catalog, employee_headers):
        sale = post_sale(client, employee_headers,
                         items=[{"product_id": catalog["soda"].id, "quantity": 1}]).get_json()
        assert client.delete(f"/api/sales/{sale['id']}", headers=employee_headers).status_code == 403

    def test_delete_needs_view_and_manage(self, client, catalog, admin_headers, cashier_headers):
        client.post("/api/roles/cashier/permissions", json={"permission_name": "manage_sales"},
                    headers=admin_headers)
        sale = post_sale(client, cashier_headers,
                         items=[{"product_id": catalog["soda"].id, "quantity": 1}]).get_json()

        assert client.delete(f"/api/sales/{sale['id']}", headers=cashier_headers).status_code == 403


# =============================================================================
# RECEIPTS
# =============================================================================


class TestReceipts:
    def test_sale_receipt_for_cashier(self, client, catalog, cashier_headers):
        sale = post_sale(client, cashier_headers, items=[{"product_id": catalog["soda"].id, "quantity": 2}],
                         amount_received=10000).get_json()

        resp = client.get(f"/api/sales/{sale['id']}/receipt", headers=cashier_headers)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["kind"] == "sale"
        assert body["receipt_number"] == f"{sale['id']:08d}"
        assert body["print_copies"] == 1
        assert "Gaseosa" in body["html"]
        assert "Cambio: $ 4.000" in body["html"]

    def test_abono_receipt(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog, initial_payment=5000)
        resp = client.post(f"/api/installments/{sale['id']}/payments", json={"amount": 4000},
                           headers=employee_headers)
        payment_id = resp.get_json()["payment"]["id"]

        resp = client.get(f"/api/installments/{sale['id']}/payments/{payment_id}/receipt",
                          headers=employee_headers)

        html = resp.get_json()["html"]
        assert resp.get_json()["kind"] == "installment"
        assert "ABONADO ANTERIOR:</span><span>$ 5.000" in html
        assert "ABONO ACTUAL:</span><span>$ 4.000" in html
        assert "SALDO RESTANTE:</span><span>$ 6.000" in html

    def test_unknown_payment(self, client, catalog, employee_headers):
        sale = installment_sale(client, employee_headers, catalog)
        resp = client.get(f"/api/installments/{sale['id']}/payments/999/receipt", headers=employee_headers)
        assert resp.status_code == 404
