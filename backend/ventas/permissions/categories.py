# Overview: Module tags grouping permissions by screen.


class PermissionModule:
    """Screen modules that own permissions."""
    DASHBOARD = "dashboard"
    SALES = "sales"
    CASH_REGISTER = "cash_register"
    INSTALLMENTS = "installments"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    CUSTOMERS = "customers"
    SUPPLIERS = "suppliers"
    USERS = "users"
    SETTINGS = "settings"
    AUDIT = "audit"
