# Overview: Navigation menu definitions shared by the server and client shells.

from __future__ import annotations

from dataclasses import dataclass

from .guard import AccessGuard


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    category: str
    permission: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "permission": self.permission,
        }


CATEGORY_LABELS = {
    "main": "Principal",
    "sales": "Ventas",
    "inventory": "Inventario",
    "contacts": "Contactos",
    "admin": "Administración",
}


MENU = (
    MenuItem("dashboard", "Dashboard", "main", "view_dashboard"),
    MenuItem("new-sale", "Nueva Venta", "sales", "create_sales"),
    MenuItem("cash-register", "Caja", "sales", "manage_cash_register"),
    MenuItem("sales", "Historial", "sales", "view_sales"),
    MenuItem("installments", "Abonos", "sales", "manage_installments"),
    MenuItem("products", "Productos", "inventory", "view_products"),
    MenuItem("categories", "Categorías", "inventory", "view_categories"),
    MenuItem("customers", "Clientes", "contacts", "view_customers"),
    MenuItem("suppliers", "Proveedores", "contacts", "view_suppliers"),
    MenuItem("users", "Usuarios", "admin", "manage_users"),
    MenuItem("settings", "Configuración", "admin", "manage_settings"),
    MenuItem("audit", "Auditoría", "admin", "view_audit"),
)

_MENU_BY_ID = {item.id: item for item in MENU}


def get_menu_item(screen_id: str) -> MenuItem | None:
    return _MENU_BY_ID.get(screen_id)


def visible_menu(guard: AccessGuard) -> list[MenuItem]:
    """Menu items whose permission is in the guard's directory, in menu order."""
    return [item for item in MENU if guard.has_permission(item.permission)]


def grouped_menu(guard: AccessGuard) -> list[dict]:
    """Visible items grouped by category; empty categories are omitted."""
    groups = []
    for category, label in CATEGORY_LABELS.items():
        items = [item.to_dict() for item in visible_menu(guard) if item.category == category]
        if items:
            groups.append({"category": category, "label": label, "items": items})
    return groups
