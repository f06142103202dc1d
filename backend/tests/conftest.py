"""
Pytest fixtures for VentasFULL backend tests.

Provides an in-memory database per test, seeded permissions, one employee
per role and authentication helpers.
"""

import pytest

from ventas import create_app
from ventas.extensions import db
from ventas.models import Category, Customer, Product
from ventas.services import auth_service, permission_service


PASSWORD = "Secreto1"

ROLE_EMAILS = {
    "admin": "admin@ventas.test",
    "manager": "gerente@ventas.test",
    "employee": "empleado@ventas.test",
    "cashier": "cajero@ventas.test",
}


@pytest.fixture()
def app():
    """Create application for testing."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "BCRYPT_ROUNDS": 4,
    })

    with app.app_context():
        db.create_all()
        permission_service.initialize_permissions()
        permission_service.assign_default_role_permissions()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture()
def users(app):
    """One active employee per role, keyed by role tag."""
    return {
        role: auth_service.create_user(role.title(), email, PASSWORD, role=role)
        for role, email in ROLE_EMAILS.items()
    }


def get_auth_token(client, email: str, password: str = PASSWORD) -> str | None:
    """Helper to get auth token for an employee."""
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    if response.status_code == 200:
        return response.get_json().get("token")
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {"Authorization": f"Bearer {token}"}


def _headers_for(client, role: str) -> dict:
    token = get_auth_token(client, ROLE_EMAILS[role])
    assert token, f"login failed for {role}"
    return auth_headers(token)


@pytest.fixture()
def admin_headers(client, users):
    return _headers_for(client, "admin")


@pytest.fixture()
def manager_headers(client, users):
    return _headers_for(client, "manager")


@pytest.fixture()
def employee_headers(client, users):
    return _headers_for(client, "employee")


@pytest.fixture()
def cashier_headers(client, users):
    return _headers_for(client, "cashier")


@pytest.fixture()
def catalog(app):
    """A category, two products and a customer."""
    category = Category(name="Bebidas")
    db.session.add(category)
    db.session.flush()

    soda = Product(name="Gaseosa", barcode="7700001", sale_price=3000, purchase_price=2000, stock=10,
                   category_id=category.id)
    chips = Product(name="Papas", barcode="7700002", sale_price=2500, purchase_price=1500, stock=3,
                    category_id=category.id)
    customer = Customer(name="Ana Pérez", cedula="1020304050", phone="3001234567")
    db.session.add_all([soda, chips, customer])
    db.session.commit()

    return {"category": category, "soda": soda, "chips": chips, "customer": customer}
