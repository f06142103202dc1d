"""
Auth gateway tests against an in-memory backend.

Verifies:
- Every sign-in failure yields the same generic message
- Transport failures yield a connection message, not a credential one
- Sign-out clears local state even when the server is unreachable
- Invalid stored tokens are cleared silently on restore
- A failed permission load leaves the user signed in with no permissions
"""

import logging

from ventas.access import AccessGuard, AuthState
from ventas.client import (
    CONNECTION_ERROR,
    INVALID_CREDENTIALS,
    AuthGateway,
    MemorySessionStore,
    RpcError,
)


PERMISSIONS = [
    {"permission_name": "view_dashboard", "description": "", "module": "dashboard"},
    {"permission_name": "create_sales", "description": "", "module": "sales"},
]


class FakeBackend:
    def __init__(self):
        self.accounts = {
            "ana@ventas.test": ("Secreto1", {"user_id": 1, "name": "Ana", "email": "ana@ventas.test",
                                             "role": "cashier", "is_active": True}),
        }
        self.sessions = {}
        self.permissions = {1: PERMISSIONS}
        self.fail = set()
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise RpcError(f"{name} timed out")

    def authenticate(self, email, password):
        self._maybe_fail("authenticate")
        account = self.accounts.get(email)
        if not account or account[0] != password or not account[1]["is_active"]:
            return None
        token = f"token-{len(self.sessions) + 1}"
        self.sessions[token] = account[1]
        return {"session_token": token, **account[1]}

    def validate_session(self, token):
        self._maybe_fail("validate_session")
        return self.sessions.get(token)

    def logout(self, token):
        self._maybe_fail("logout")
        self.sessions.pop(token, None)

    def get_permissions(self, user_id, token=None):
        self._maybe_fail("get_permissions")
        return self.permissions.get(user_id, [])


def make_gateway(backend=None, store=None):
    return AuthGateway(backend or FakeBackend(), store or MemorySessionStore(), AuthState())


# =============================================================================
# SIGN IN
# =============================================================================


class TestSignIn:
    def test_success_stores_token_and_loads_permissions(self):
        gateway = make_gateway()

        result = gateway.sign_in("ana@ventas.test", "Secreto1")

        assert result.ok
        assert result.user.role == "cashier"
        assert gateway.store.get_token() == "token-1"
        assert gateway.state.directory.names == {"view_dashboard", "create_sales"}
        assert gateway.state.loading is False

    def test_wrong_password_and_unknown_email_look_the_same(self):
        gateway = make_gateway()

        wrong_password = gateway.sign_in("ana@ventas.test", "nope")
        unknown_email = gateway.sign_in("nadie@ventas.test", "Secreto1")

        assert wrong_password.error == unknown_email.error == INVALID_CREDENTIALS
        assert gateway.store.get_token() is None
        assert not gateway.state.is_authenticated

    def test_inactive_account_gets_generic_error(self):
        backend = FakeBackend()
        backend.accounts["ana@ventas.test"][1]["is_active"] = False

        result = make_gateway(backend).sign_in("ana@ventas.test", "Secreto1")

        assert result.error == INVALID_CREDENTIALS

    def test_transport_failure_is_connection_error(self):
        backend = FakeBackend()
        backend.fail.add("authenticate")
        gateway = make_gateway(backend)

        result = gateway.sign_in("ana@ventas.test", "Secreto1")

        assert not result.ok
        assert result.error == CONNECTION_ERROR
        assert gateway.state.loading is False

    def test_permission_failure_leaves_empty_directory(self, caplog):
        backend = FakeBackend()
        backend.fail.add("get_permissions")
        gateway = make_gateway(backend)

        with caplog.at_level(logging.ERROR, logger="ventas.client.auth_gateway"):
            result = gateway.sign_in("ana@ventas.test", "Secreto1")

        assert result.ok
        assert gateway.state.is_authenticated
        assert len(gateway.state.directory) == 0
        assert not AccessGuard(gateway.state).has_any_permission(["view_dashboard", "create_sales"])
        assert "Could not load permissions" in caplog.text

    def test_permissions_load_after_session(self):
        backend = FakeBackend()
        make_gateway(backend).sign_in("ana@ventas.test", "Secreto1")
        assert backend.calls == ["authenticate", "get_permissions"]


# =============================================================================
# SIGN OUT
# =============================================================================


class TestSignOut:
    def test_clears_everything(self):
        gateway = make_gateway()
        gateway.sign_in("ana@ventas.test", "Secreto1")

        gateway.sign_out()

        assert gateway.store.get_token() is None
        assert not gateway.state.is_authenticated
        assert len(gateway.state.directory) == 0
        assert gateway.backend.sessions == {}

    def test_clears_local_state_when_server_unreachable(self):
        backend = FakeBackend()
        gateway = make_gateway(backend)
        gateway.sign_in("ana@ventas.test", "Secreto1")
        backend.fail.add("logout")

        gateway.sign_out()

        assert gateway.store.get_token() is None
        assert not gateway.state.is_authenticated

    def test_without_session_is_noop(self):
        backend = FakeBackend()
        make_gateway(backend).sign_out()
        assert "logout" not in backend.calls


# =============================================================================
# RESTORE
# =============================================================================


class TestRestoreSession:
    def test_restores_valid_token(self):
        backend = FakeBackend()
        store = MemorySessionStore()
        make_gateway(backend, store).sign_in("ana@ventas.test", "Secreto1")

        fresh = make_gateway(backend, store)
        user = fresh.restore_session()

        assert user is not None
        assert user.email == "ana@ventas.test"
        assert fresh.state.directory.has("create_sales")

    def test_invalid_token_is_cleared_silently(self):
        store = MemorySessionStore("stale-token")
        gateway = make_gateway(store=store)

        assert gateway.restore_session() is None
        assert store.get_token() is None
        assert not gateway.state.is_authenticated

    def test_transport_failure_logs_out(self):
        backend = FakeBackend()
        backend.fail.add("validate_session")
        store = MemorySessionStore("token-1")
        gateway = make_gateway(backend, store)

        assert gateway.restore_session() is None
        assert store.get_token() is None

    def test_no_token_skips_backend(self):
        backend = FakeBackend()
        assert make_gateway(backend).restore_session() is None
        assert backend.calls == []
