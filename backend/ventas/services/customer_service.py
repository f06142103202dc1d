# Overview: Service-layer operations for customers.

from sqlalchemy import func, or_

from ..extensions import db
from ..models import Customer, Sale
from ..validation import ConflictError, NotFoundError


def list_customers(search: str | None = None) -> list[Customer]:
    """Customers ordered by name; search matches name, cédula or phone."""
    query = db.session.query(Customer)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(or_(
            func.lower(Customer.name).like(pattern),
            Customer.cedula.like(pattern),
            Customer.phone.like(pattern),
        ))
    return query.order_by(Customer.name).all()


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise NotFoundError("Cliente no encontrado")
    return customer


def _check_cedula(cedula: str | None, exclude_id: int | None = None) -> None:
    if not cedula:
        return
    query = db.session.query(Customer).filter(Customer.cedula == cedula)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if query.first():
        raise ConflictError("Ya existe un cliente con esta cédula")


def create_customer(patch: dict) -> Customer:
    _check_cedula(patch.get("cedula"))
    customer = Customer(**patch)
    db.session.add(customer)
    db.session.commit()
    return customer


def update_customer(customer_id: int, patch: dict) -> Customer:
    customer = get_customer(customer_id)
    _check_cedula(patch.get("cedula"), exclude_id=customer.id)
    for key, value in patch.items():
        setattr(customer, key, value)
    db.session.commit()
    return customer


def delete_customer(customer_id: int) -> None:
    """Delete a customer without sales; customers with sales are kept for history."""
    customer = get_customer(customer_id)
    if db.session.query(Sale.id).filter_by(customer_id=customer.id).first():
        raise ConflictError("No se puede eliminar un cliente con ventas registradas")
    db.session.delete(customer)
    db.session.commit()
