# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionModule
from .definitions import (
    PERMISSION_DEFINITIONS,
    DASHBOARD_PERMISSIONS,
    SALES_PERMISSIONS,
    CASH_REGISTER_PERMISSIONS,
    INSTALLMENT_PERMISSIONS,
    PRODUCT_PERMISSIONS,
    CATEGORY_PERMISSIONS,
    CUSTOMER_PERMISSIONS,
    SUPPLIER_PERMISSIONS,
    USER_PERMISSIONS,
    SETTINGS_PERMISSIONS,
    AUDIT_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS, ROLE_ORDER, ROLE_LABELS, role_rank, validate_role
from .helpers import (
    get_all_permission_names,
    get_permissions_by_module,
    get_permission_definition,
    validate_permission_name,
)

__all__ = [
    "PermissionModule",
    "PERMISSION_DEFINITIONS",
    "DASHBOARD_PERMISSIONS",
    "SALES_PERMISSIONS",
    "CASH_REGISTER_PERMISSIONS",
    "INSTALLMENT_PERMISSIONS",
    "PRODUCT_PERMISSIONS",
    "CATEGORY_PERMISSIONS",
    "CUSTOMER_PERMISSIONS",
    "SUPPLIER_PERMISSIONS",
    "USER_PERMISSIONS",
    "SETTINGS_PERMISSIONS",
    "AUDIT_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "ROLE_ORDER",
    "ROLE_LABELS",
    "role_rank",
    "validate_role",
    "get_all_permission_names",
    "get_permissions_by_module",
    "get_permission_definition",
    "validate_permission_name",
]
