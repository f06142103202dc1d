# Overview: All permission definitions organized by module.
# Each permission is defined as: (name, description, module)

from .categories import PermissionModule


# -- DASHBOARD --

DASHBOARD_PERMISSIONS = [
    ("view_dashboard", "Ver el panel principal y sus estadísticas", PermissionModule.DASHBOARD),
]


# -- SALES --

SALES_PERMISSIONS = [
    ("create_sales", "Registrar nuevas ventas", PermissionModule.SALES),
    ("view_sales", "Ver el historial de ventas y reimprimir comprobantes", PermissionModule.SALES),
    ("manage_sales", "Eliminar ventas y corregir registros", PermissionModule.SALES),
]


# -- CASH REGISTER --

CASH_REGISTER_PERMISSIONS = [
    ("manage_cash_register", "Abrir, operar y cerrar la caja", PermissionModule.CASH_REGISTER),
]


# -- INSTALLMENTS --

INSTALLMENT_PERMISSIONS = [
    ("manage_installments", "Registrar abonos de ventas a crédito", PermissionModule.INSTALLMENTS),
]


# -- INVENTORY --

PRODUCT_PERMISSIONS = [
    ("view_products", "Ver productos e inventario", PermissionModule.PRODUCTS),
    ("manage_products", "Crear, editar y eliminar productos", PermissionModule.PRODUCTS),
]

CATEGORY_PERMISSIONS = [
    ("view_categories", "Ver categorías", PermissionModule.CATEGORIES),
    ("manage_categories", "Crear, editar y eliminar categorías", PermissionModule.CATEGORIES),
]


# -- CONTACTS --

CUSTOMER_PERMISSIONS = [
    ("view_customers", "Ver clientes", PermissionModule.CUSTOMERS),
    ("manage_customers", "Crear, editar y eliminar clientes", PermissionModule.CUSTOMERS),
]

SUPPLIER_PERMISSIONS = [
    ("view_suppliers", "Ver proveedores", PermissionModule.SUPPLIERS),
    ("manage_suppliers", "Crear, editar y eliminar proveedores", PermissionModule.SUPPLIERS),
]


# -- ADMIN --

USER_PERMISSIONS = [
    ("view_users", "Ver empleados", PermissionModule.USERS),
    ("manage_users", "Crear empleados, cambiar roles y desactivar cuentas", PermissionModule.USERS),
]

SETTINGS_PERMISSIONS = [
    ("manage_settings", "Editar la configuración de impresión y de la empresa", PermissionModule.SETTINGS),
]

AUDIT_PERMISSIONS = [
    ("view_audit", "Ver eventos de seguridad", PermissionModule.AUDIT),
]


PERMISSION_DEFINITIONS = (
    DASHBOARD_PERMISSIONS
    + SALES_PERMISSIONS
    + CASH_REGISTER_PERMISSIONS
    + INSTALLMENT_PERMISSIONS
    + PRODUCT_PERMISSIONS
    + CATEGORY_PERMISSIONS
    + CUSTOMER_PERMISSIONS
    + SUPPLIER_PERMISSIONS
    + USER_PERMISSIONS
    + SETTINGS_PERMISSIONS
    + AUDIT_PERMISSIONS
)
