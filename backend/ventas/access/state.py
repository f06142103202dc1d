# Overview: Explicit auth state passed to the gateway, the guard and the shells.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .directory import PermissionDirectory


@dataclass(frozen=True)
class SessionUser:
    id: int
    name: str
    email: str
    role: str
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Mapping) -> "SessionUser":
        """Build from an authenticate/validate_session record."""
        user_id = record.get("user_id", record.get("id"))
        if user_id is None:
            raise ValueError("User record without an id")
        return cls(
            id=user_id,
            name=record.get("name") or record.get("user_name") or "",
            email=record.get("email") or record.get("user_email") or "",
            role=record.get("role") or record.get("user_role") or "",
            is_active=bool(record.get("is_active", True)),
        )

    @classmethod
    def from_model(cls, user) -> "SessionUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_active=bool(user.is_active),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
        }


@dataclass
class AuthState:
    """
    Who is signed in and what they may do.

    One instance per shell (or per request on the server). Nothing here is
    global; callers construct it and hand it to whoever needs it.
    """
    user: SessionUser | None = None
    directory: PermissionDirectory = field(default_factory=PermissionDirectory)
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> str | None:
        return self.user.role if self.user else None

    def set_user(self, user: SessionUser) -> None:
        self.user = user
        # Permissions from a previous user never carry over
        self.directory.clear()

    def set_permissions(self, records: Iterable) -> None:
        self.directory.load(records)

    def clear(self) -> None:
        self.user = None
        self.directory.clear()
        self.loading = False
