from .directory import PermissionDirectory, PermissionEntry
from .state import AuthState, SessionUser
from .guard import ACCESS_DENIED, AccessDenied, AccessGuard, Requirement, role_satisfies
from .menu import MENU, MenuItem, get_menu_item, grouped_menu, visible_menu
from .recovery import RECOVERY_SCREEN, RecoveryAction, RecoveryScreen

__all__ = [
    "PermissionDirectory",
    "PermissionEntry",
    "AuthState",
    "SessionUser",
    "ACCESS_DENIED",
    "AccessDenied",
    "AccessGuard",
    "Requirement",
    "role_satisfies",
    "MENU",
    "MenuItem",
    "get_menu_item",
    "grouped_menu",
    "visible_menu",
    "RECOVERY_SCREEN",
    "RecoveryAction",
    "RecoveryScreen",
]
