"""Receipt settings API tests."""

from ventas.services import settings_service


def test_defaults(client, admin_headers):
    resp = client.get("/api/settings/receipt", headers=admin_headers)
    assert resp.status_code == 200
    settings = resp.get_json()["settings"]
    assert settings["company_name"] == "VentasFULL"
    assert settings["receipt_width"] == "80mm"
    assert len(settings) == 31


def test_patch_merges(client, manager_headers):
    client.patch("/api/settings/receipt", json={"company_name": "Tienda Luz"}, headers=manager_headers)
    resp = client.patch("/api/settings/receipt", json={"show_qr": True}, headers=manager_headers)

    settings = resp.get_json()["settings"]
    assert settings["company_name"] == "Tienda Luz"
    assert settings["show_qr"] is True
    assert settings_service.get_receipt_config().company_name == "Tienda Luz"


def test_put_replaces(client, admin_headers):
    client.patch("/api/settings/receipt", json={"company_name": "Tienda Luz"}, headers=admin_headers)
    resp = client.put("/api/settings/receipt", json={"print_copies": 2}, headers=admin_headers)

    settings = resp.get_json()["settings"]
    assert settings["company_name"] == "VentasFULL"
    assert settings["print_copies"] == 2


def test_unknown_key_rejected(client, admin_headers):
    resp = client.patch("/api/settings/receipt", json={"show_confetti": True}, headers=admin_headers)
    assert resp.status_code == 400
    assert "show_confetti" in resp.get_json()["error"]
    assert settings_service.get_setting(settings_service.RECEIPT_SETTINGS_KEY) is None


def test_bad_value_rejected(client, admin_headers):
    resp = client.patch("/api/settings/receipt", json={"receipt_width": "120mm"}, headers=admin_headers)
    assert resp.status_code == 400


def test_non_object_body_rejected(client, admin_headers):
    resp = client.patch("/api/settings/receipt", json=["show_qr"], headers=admin_headers)
    assert resp.status_code == 400


def test_reset(client, admin_headers):
    client.patch("/api/settings/receipt", json={"company_name": "Tienda Luz"}, headers=admin_headers)
    resp = client.post("/api/settings/receipt/reset", headers=admin_headers)
    assert resp.get_json()["settings"]["company_name"] == "VentasFULL"


def test_preview_uses_unsaved_options(client, admin_headers):
    resp = client.post("/api/settings/receipt/preview", json={"company_name": "Vista Previa", "show_qr": True},
                       headers=admin_headers)

    html = resp.get_json()["html"]
    assert "Vista Previa" in html
    assert 'class="qr"' in html
    assert settings_service.get_receipt_config().company_name == "VentasFULL"


def test_saved_settings_reach_sale_receipts(client, catalog, admin_headers):
    client.patch("/api/settings/receipt", json={"company_name": "Tienda Luz", "print_copies": 3},
                 headers=admin_headers)
    sale = client.post("/api/sales", json={"items": [{"product_id": catalog["soda"].id, "quantity": 1}]},
                       headers=admin_headers).get_json()

    body = client.get(f"/api/sales/{sale['id']}/receipt", headers=admin_headers).get_json()
    assert "Tienda Luz" in body["html"]
    assert body["print_copies"] == 3


def test_employee_denied(client, employee_headers):
    assert client.get("/api/settings/receipt", headers=employee_headers).status_code == 403
