"""
Access guard tests.

Verifies:
- Permission directory membership is exact
- has_any / has_all semantics, including empty inputs
- Role order admin > manager > employee > cashier; unknown roles never pass
- guard() never calls the protected render when the check fails
- Menu filtering hides items without permission
"""

import pytest

from ventas.access import (
    ACCESS_DENIED,
    MENU,
    AccessGuard,
    AuthState,
    PermissionDirectory,
    SessionUser,
    grouped_menu,
    role_satisfies,
    visible_menu,
)


def make_state(role="employee", permissions=()):
    state = AuthState()
    state.set_user(SessionUser(id=1, name="Test", email="t@ventas.test", role=role))
    state.set_permissions(permissions)
    return state


# =============================================================================
# PERMISSION DIRECTORY
# =============================================================================


class TestPermissionDirectory:
    def test_loads_wire_records(self):
        directory = PermissionDirectory([
            {"permission_name": "view_sales", "description": "Ver ventas", "module": "sales"},
            {"permission_name": "create_sales", "description": "", "module": "sales"},
        ])
        assert directory.names == frozenset({"view_sales", "create_sales"})
        assert directory.by_module() == {"sales": ["view_sales", "create_sales"]}

    def test_load_replaces_previous_entries(self):
        directory = PermissionDirectory(["view_sales"])
        directory.load(["view_products"])
        assert "view_sales" not in directory
        assert "view_products" in directory

    def test_membership_is_exact(self):
        directory = PermissionDirectory(["view_sales"])
        assert not directory.has("view_sale")
        assert not directory.has("VIEW_SALES")
        assert not directory.has("*")

    def test_record_without_name_is_rejected(self):
        with pytest.raises(ValueError):
            PermissionDirectory([{"description": "x"}])


# =============================================================================
# PERMISSION CHECKS
# =============================================================================


class TestPermissionChecks:
    def test_has_permission(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        assert guard.has_permission("view_sales")
        assert not guard.has_permission("manage_users")

    def test_has_any_permission_is_or(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        assert guard.has_any_permission(["manage_users", "view_sales"])
        assert not guard.has_any_permission(["manage_users", "view_audit"])

    def test_has_any_permission_false_for_empty_directory(self):
        guard = AccessGuard(make_state(permissions=[]))
        assert not guard.has_any_permission(["view_sales", "view_products"])

    def test_has_any_permission_false_for_empty_list(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        assert not guard.has_any_permission([])

    def test_has_all_permissions_is_and(self):
        guard = AccessGuard(make_state(permissions=["view_sales", "create_sales"]))
        assert guard.has_all_permissions(["view_sales", "create_sales"])
        assert not guard.has_all_permissions(["view_sales", "manage_sales"])
        assert not guard.has_all_permissions([])

    def test_missing_permissions(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        assert guard.missing_permissions(["view_sales", "manage_sales"]) == ["manage_sales"]


# =============================================================================
# ROLES
# =============================================================================


class TestRoles:
    @pytest.mark.parametrize(
        "user_role,required,expected",
        [
            ("admin", "cashier", True),
            ("admin", "admin", True),
            ("manager", "employee", True),
            ("manager", "admin", False),
            ("employee", "employee", True),
            ("employee", "manager", False),
            ("cashier", "employee", False),
            ("cashier", "cashier", True),
            ("superuser", "cashier", False),
            (None, "cashier", False),
            ("admin", "owner", False),
        ],
    )
    def test_role_order(self, user_role, required, expected):
        assert role_satisfies(user_role, required) is expected

    def test_has_role_false_when_signed_out(self):
        guard = AccessGuard(AuthState())
        assert not guard.has_role("cashier")

    def test_role_and_permission_checks_are_independent(self):
        # An admin without the permission row is still denied by has_permission
        guard = AccessGuard(make_state(role="admin", permissions=[]))
        assert guard.has_role("manager")
        assert not guard.has_permission("manage_users")


# =============================================================================
# GUARD
# =============================================================================


class TestGuard:
    def test_renders_when_allowed(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        assert guard.guard(lambda: "sales screen", permission="view_sales") == "sales screen"

    def test_denied_never_calls_render(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        calls = []

        def render():
            calls.append(1)
            return "users screen"

        assert guard.guard(render, permission="manage_users") is ACCESS_DENIED
        assert calls == []

    def test_require_all(self):
        guard = AccessGuard(make_state(permissions=["view_sales"]))
        result = guard.guard(lambda: "ok", permissions=["view_sales", "manage_sales"], require_all=True)
        assert result is ACCESS_DENIED
        assert guard.guard(lambda: "ok", permissions=["view_sales", "manage_sales"]) == "ok"

    def test_role_requirement(self):
        guard = AccessGuard(make_state(role="cashier", permissions=["view_sales"]))
        assert guard.guard(lambda: "ok", permission="view_sales", role="manager") is ACCESS_DENIED

    def test_empty_requirement_passes(self):
        guard = AccessGuard(AuthState())
        assert guard.guard(lambda: "public") == "public"

    def test_signed_out_user_is_denied(self):
        guard = AccessGuard(AuthState())
        assert guard.guard(lambda: "ok", permission="view_sales") is ACCESS_DENIED

    def test_denial_placeholder_is_fixed(self):
        assert ACCESS_DENIED.to_dict() == {
            "code": "ACCESS_DENIED",
            "error": "Acceso denegado",
            "title": "Acceso Restringido",
            "message": "No tienes permisos para acceder a esta sección.",
        }


# =============================================================================
# MENU
# =============================================================================


class TestMenu:
    def test_visible_menu_follows_directory(self):
        guard = AccessGuard(make_state(permissions=["view_dashboard", "create_sales", "view_products"]))
        assert [item.id for item in visible_menu(guard)] == ["dashboard", "new-sale", "products"]

    def test_empty_directory_shows_nothing(self):
        guard = AccessGuard(make_state(permissions=[]))
        assert visible_menu(guard) == []
        assert grouped_menu(guard) == []

    def test_all_permissions_show_whole_menu(self):
        guard = AccessGuard(make_state(role="admin", permissions=[item.permission for item in MENU]))
        assert len(visible_menu(guard)) == len(MENU)

    def test_grouped_menu_omits_empty_categories(self):
        guard = AccessGuard(make_state(permissions=["view_customers", "manage_settings"]))
        groups = grouped_menu(guard)
        assert [g["category"] for g in groups] == ["contacts", "admin"]
        assert groups[1]["items"][0]["id"] == "settings"

    def test_set_user_clears_previous_permissions(self):
        state = make_state(permissions=["manage_users"])
        state.set_user(SessionUser(id=2, name="Otro", email="o@ventas.test", role="cashier"))
        assert not AccessGuard(state).has_permission("manage_users")
