# Overview: Local persistence of the employee session token.

"""
Session Store

Holds exactly one value, the opaque session token, under the key
employee_session_token. Written on sign-in; cleared on sign-out or as soon
as the token is found invalid.

A corrupt or unreadable file reads as "no session"; the next sign-in
overwrites it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path


logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "employee_session_token"


class MemorySessionStore:
    """In-process store; nothing survives a restart."""

    def __init__(self, token: str | None = None):
        self._token = token

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileSessionStore:
    """Token persisted as {"employee_session_token": "..."} in a JSON file."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def get_token(self) -> str | None:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Unreadable session file %s; treating as signed out", self.path)
            return None

        if not isinstance(data, dict):
            return None
        token = data.get(SESSION_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump({SESSION_TOKEN_KEY: token}, fh)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
