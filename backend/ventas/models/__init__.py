from .auth import User, Permission, RolePermission, SessionToken
from .security import SecurityEvent
from .catalog import Category, Supplier, Product
from .customers import Customer
from .sales import Sale, SaleItem, Payment
from .registers import CashRegister, CashMovement
from .settings import Setting

__all__ = [
    'User', 'Permission', 'RolePermission', 'SessionToken', 'SecurityEvent',
    'Category', 'Supplier', 'Product',
    'Customer',
    'Sale', 'SaleItem', 'Payment',
    'CashRegister', 'CashMovement',
    'Setting',
]
