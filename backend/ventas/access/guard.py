# Overview: Access Guard; the one place that decides what a user may see.

"""
Access Guard

Both shells use this module:
- the server decorators (ventas.decorators) build an AuthState per request
- the client navigation shell (ventas.client.navigation) holds one AuthState

RULES:
- has_permission(p) is exact membership in the permission directory
- has_any_permission is logical OR and is False for an empty directory
- has_role follows admin > manager > employee > cashier
- guard() calls the protected render only after the check passes and
  otherwise returns the fixed ACCESS_DENIED placeholder, never a partial
  version of the real content
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from ventas.permissions.roles import role_rank

from .state import AuthState


T = TypeVar("T")


@dataclass(frozen=True)
class AccessDenied:
    code: str = "ACCESS_DENIED"
    error: str = "Acceso denegado"
    title: str = "Acceso Restringido"
    message: str = "No tienes permisos para acceder a esta sección."

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "error": self.error,
            "title": self.title,
            "message": self.message,
        }


ACCESS_DENIED = AccessDenied()


@dataclass(frozen=True)
class Requirement:
    """
    What a screen or action needs.

    permission: single permission name
    permissions: several names, any one suffices unless require_all
    role: minimum role rank
    All given conditions must hold. An empty requirement always passes.
    """
    permission: str | None = None
    permissions: tuple[str, ...] = ()
    require_all: bool = False
    role: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.permission is None and not self.permissions and self.role is None


def role_satisfies(user_role: str | None, required: str) -> bool:
    """True when user_role ranks at or above required. Unknown roles never pass."""
    user_rank = role_rank(user_role)
    required_rank = role_rank(required)
    if user_rank < 0 or required_rank < 0:
        return False
    return user_rank >= required_rank


class AccessGuard:
    def __init__(self, state: AuthState):
        self.state = state

    def has_permission(self, name: str) -> bool:
        return self.state.directory.has(name)

    def has_any_permission(self, names: Iterable[str]) -> bool:
        return any(self.has_permission(name) for name in names)

    def has_all_permissions(self, names: Iterable[str]) -> bool:
        names = list(names)
        if not names:
            return False
        return all(self.has_permission(name) for name in names)

    def has_role(self, required: str) -> bool:
        if not self.state.is_authenticated:
            return False
        return role_satisfies(self.state.role, required)

    def missing_permissions(self, names: Iterable[str]) -> list[str]:
        return [name for name in names if not self.has_permission(name)]

    def allows(self, requirement: Requirement) -> bool:
        if requirement.is_empty:
            return True
        if not self.state.is_authenticated:
            return False
        if requirement.permission is not None and not self.has_permission(requirement.permission):
            return False
        if requirement.permissions:
            if requirement.require_all:
                if not self.has_all_permissions(requirement.permissions):
                    return False
            elif not self.has_any_permission(requirement.permissions):
                return False
        if requirement.role is not None and not self.has_role(requirement.role):
            return False
        return True

    def check(
        self,
        permission: str | None = None,
        permissions: Iterable[str] = (),
        require_all: bool = False,
        role: str | None = None,
    ) -> bool:
        return self.allows(
            Requirement(
                permission=permission,
                permissions=tuple(permissions),
                require_all=require_all,
                role=role,
            )
        )

    def guard(
        self,
        render: Callable[[], T],
        permission: str | None = None,
        permissions: Iterable[str] = (),
        require_all: bool = False,
        role: str | None = None,
    ) -> T | AccessDenied:
        """Render protected content, or the denial placeholder if the check fails."""
        if not self.check(permission, permissions, require_all, role):
            return ACCESS_DENIED
        return render()
