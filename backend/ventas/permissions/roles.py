# Overview: Role tags, their rank order and default permission sets.

from .definitions import PERMISSION_DEFINITIONS


# Lowest rank first. A role satisfies every role at or below its position.
ROLE_ORDER = ("cashier", "employee", "manager", "admin")

ROLE_LABELS = {
    "admin": "Administrador",
    "manager": "Gerente",
    "employee": "Empleado",
    "cashier": "Cajero",
}


DEFAULT_ROLE_PERMISSIONS = {
    "admin": [perm[0] for perm in PERMISSION_DEFINITIONS],
    "manager": [
        "view_dashboard",
        "view_products",
        "manage_products",
        "view_categories",
        "manage_categories",
        "view_suppliers",
        "manage_suppliers",
        "view_customers",
        "manage_customers",
        "create_sales",
        "view_sales",
        "manage_sales",
        "manage_cash_register",
        "manage_installments",
        "view_users",
        "manage_settings",
        "view_audit",
    ],
    "employee": [
        "view_dashboard",
        "view_products",
        "view_categories",
        "view_customers",
        "create_sales",
        "view_sales",
        "manage_cash_register",
        "manage_installments",
    ],
    "cashier": [
        "view_dashboard",
        "view_products",
        "view_customers",
        "create_sales",
        "manage_cash_register",
    ],
}


def role_rank(role: str | None) -> int:
    """Position of a role in ROLE_ORDER, or -1 for unknown roles."""
    if role not in ROLE_ORDER:
        return -1
    return ROLE_ORDER.index(role)


def validate_role(role: str) -> bool:
    return role in ROLE_ORDER
