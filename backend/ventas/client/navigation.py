# Overview: Client navigation shell; menu filtering and guarded screen rendering.

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from ventas.access import (
    ACCESS_DENIED,
    RECOVERY_SCREEN,
    AccessGuard,
    AuthState,
    MenuItem,
    get_menu_item,
    grouped_menu,
    visible_menu,
)


logger = logging.getLogger(__name__)


class NavigationShell:
    """
    The signed-in shell: menu plus one active screen.

    screens maps a menu item id to a zero-argument loader returning the
    screen content. A loader is only called after the guard has passed;
    a denied screen yields ACCESS_DENIED and a failing loader yields the
    recovery screen.
    """

    def __init__(self, state: AuthState, screens: Mapping[str, Callable[[], Any]]):
        self.state = state
        self.guard = AccessGuard(state)
        self.screens = dict(screens)
        self.current: str | None = None
        self.previous: str | None = None

    def visible_items(self) -> list[MenuItem]:
        return visible_menu(self.guard)

    def groups(self) -> list[dict]:
        return grouped_menu(self.guard)

    def default_screen(self) -> str | None:
        items = self.visible_items()
        return items[0].id if items else None

    def render(self, screen_id: str):
        """Guarded render of one screen. Never raises."""
        item = get_menu_item(screen_id)
        loader = self.screens.get(screen_id)
        if item is None or loader is None:
            return ACCESS_DENIED

        try:
            return self.guard.guard(loader, permission=item.permission)
        except Exception:
            logger.exception("Screen %s failed to render", screen_id)
            return RECOVERY_SCREEN

    def open(self, screen_id: str):
        """Switch to screen_id and render it."""
        if screen_id != self.current:
            self.previous = self.current
        self.current = screen_id
        return self.render(screen_id)

    def recover(self, action: str, reload: Callable[[], Any] | None = None):
        """
        Handle a recovery screen action.

        continue: return to the previous screen (or the default one)
        reload: run the reload callback, then render the default screen
        """
        if action not in RECOVERY_SCREEN.action_ids:
            raise ValueError(f"Unknown recovery action: {action}")

        if action == "reload":
            if reload is not None:
                reload()
            target = self.default_screen()
        else:
            target = self.previous or self.default_screen()

        if target is None:
            return ACCESS_DENIED
        return self.open(target)
