# Overview: Dashboard statistics for the main screen.

"""
Dashboard Service

WHY: The first screen after sign-in shows how the day is going. Every
number is a single aggregate query; nothing is cached.

DEFAULT_STATS is what the route serves when the database is unavailable.
"""

from datetime import timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Product, Sale
from ventas.time_utils import start_of_day, utcnow


DEFAULT_STATS = {
    "today_sales_total": 0,
    "today_sales_count": 0,
    "total_products": 0,
    "low_stock_products": 0,
    "total_customers": 0,
    "pending_installments_count": 0,
    "pending_installments_balance": 0,
    "recent_sales": [],
}


def default_stats() -> dict:
    return {**DEFAULT_STATS, "recent_sales": []}


def get_dashboard_stats(low_stock_threshold: int = 5, recent_limit: int = 5) -> dict:
    today = start_of_day(utcnow())
    tomorrow = today + timedelta(days=1)

    today_total, today_count = db.session.query(
        func.coalesce(func.sum(Sale.total_amount), 0),
        func.count(Sale.id),
    ).filter(Sale.created_at >= today, Sale.created_at < tomorrow).one()

    pending_count, pending_balance = db.session.query(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.total_amount - Sale.total_paid), 0),
    ).filter(
        Sale.payment_type == "installment",
        Sale.payment_status != "paid",
    ).one()

    total_products = db.session.query(func.count(Product.id)).scalar() or 0
    low_stock = db.session.query(func.count(Product.id)).filter(
        Product.stock <= low_stock_threshold
    ).scalar() or 0
    total_customers = db.session.query(func.count(Customer.id)).scalar() or 0

    recent = db.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).limit(recent_limit).all()

    return {
        "today_sales_total": int(today_total),
        "today_sales_count": int(today_count),
        "total_products": int(total_products),
        "low_stock_products": int(low_stock),
        "total_customers": int(total_customers),
        "pending_installments_count": int(pending_count),
        "pending_installments_balance": int(pending_balance),
        "recent_sales": [sale.to_dict(include_items=False) for sale in recent],
    }
