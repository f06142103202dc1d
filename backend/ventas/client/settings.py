# backend/ventas/client/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _default_session_file() -> str:
    return str(Path.home() / ".ventas" / "session.json")


@dataclass(frozen=True)
class ClientSettings:
    # Base URL of the Flask backend serving /rpc
    api_url: str = "http://127.0.0.1:5000"
    # Seconds before a remote procedure call is abandoned
    rpc_timeout: float = 10.0
    # JSON file holding the persisted session token
    session_file: str = ""

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_url=os.environ.get("VENTAS_API_URL", cls.api_url),
            rpc_timeout=float(os.environ.get("VENTAS_RPC_TIMEOUT", str(cls.rpc_timeout))),
            session_file=os.environ.get("VENTAS_SESSION_FILE") or _default_session_file(),
        )
