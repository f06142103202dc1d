# Overview: Client sign-in, sign-out and session restore over the remote procedures.

"""
Auth Gateway

Owns the client side of authentication. Constructed with its three
collaborators; nothing is global:
- backend: remote procedures (RpcClient or a test double)
- store: session token persistence (FileSessionStore / MemorySessionStore)
- state: the AuthState shared with the guard and the navigation shell

SECURITY:
- Every sign-in failure produces the same message, whatever the cause
- A transport failure produces a connection message that says nothing
  about the account
- Sign-out always clears local state, even when the server is unreachable
- Permissions load strictly after the session resolves; a failed load
  leaves the user signed in with an empty directory
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ventas.access import AuthState, SessionUser

from .rpc_client import RpcError
from .session_store import MemorySessionStore


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"
CONNECTION_ERROR = "Error de conexión. Intenta de nuevo."


class AuthBackend(Protocol):
    def authenticate(self, email: str, password: str) -> dict | None: ...
    def validate_session(self, token: str) -> dict | None: ...
    def logout(self, token: str) -> None: ...
    def get_permissions(self, user_id: int, token: str | None = None) -> list[dict]: ...


class SessionStore(Protocol):
    def get_token(self) -> str | None: ...
    def set_token(self, token: str) -> None: ...
    def clear(self) -> None: ...


@dataclass(frozen=True)
class AuthResult:
    user: SessionUser | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None


class AuthGateway:
    def __init__(self, backend: AuthBackend, store: SessionStore | None = None, state: AuthState | None = None):
        self.backend = backend
        self.store = store if store is not None else MemorySessionStore()
        self.state = state if state is not None else AuthState()

    def sign_in(self, email: str, password: str) -> AuthResult:
        """
        Authenticate, persist the token and load permissions.

        Returns AuthResult(user=...) on success, AuthResult(error=...) otherwise.
        """
        self.state.loading = True
        try:
            try:
                record = self.backend.authenticate(email, password)
            except RpcError:
                logger.warning("Sign-in failed: backend unreachable")
                return AuthResult(error=CONNECTION_ERROR)

            token = record.get("session_token") if isinstance(record, dict) else None
            if not token:
                return AuthResult(error=INVALID_CREDENTIALS)

            try:
                user = SessionUser.from_record(record)
            except ValueError:
                logger.error("Sign-in answered a record without a user id")
                return AuthResult(error=INVALID_CREDENTIALS)
            if not user.is_active:
                return AuthResult(error=INVALID_CREDENTIALS)

            self.store.set_token(token)
            self.state.set_user(user)
            self._load_permissions(user, token)
            return AuthResult(user=user)
        finally:
            self.state.loading = False

    def sign_out(self) -> None:
        """Best-effort remote logout; local token and state are always cleared."""
        token = self.store.get_token()
        try:
            if token:
                self.backend.logout(token)
        except RpcError:
            logger.warning("Remote logout failed; clearing local session anyway")
        finally:
            self.store.clear()
            self.state.clear()

    def restore_session(self) -> SessionUser | None:
        """
        Resume a persisted session.

        An invalid or expired token, or an unreachable backend, clears the
        stored token silently and leaves the state logged out.
        """
        token = self.store.get_token()
        if not token:
            self.state.clear()
            return None

        self.state.loading = True
        try:
            try:
                record = self.backend.validate_session(token)
            except RpcError:
                logger.warning("Session restore failed: backend unreachable")
                record = None

            if not isinstance(record, dict):
                self.store.clear()
                self.state.clear()
                return None

            try:
                user = SessionUser.from_record(record)
            except ValueError:
                self.store.clear()
                self.state.clear()
                return None

            self.state.set_user(user)
            self._load_permissions(user, token)
            return user
        finally:
            self.state.loading = False

    def refresh_permissions(self) -> None:
        """Reload the directory for the signed-in user (e.g. after a role change)."""
        if self.state.user is None:
            return
        self._load_permissions(self.state.user, self.store.get_token())

    def _load_permissions(self, user: SessionUser, token: str | None) -> None:
        try:
            records = self.backend.get_permissions(user.id, token)
            self.state.set_permissions(records or [])
        except (RpcError, ValueError):
            logger.exception("Could not load permissions for user %s", user.id)
            self.state.directory.clear()
