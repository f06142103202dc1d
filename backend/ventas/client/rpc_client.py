# Overview: HTTP client for the backend remote procedures (POST /rpc/<name>).

from __future__ import annotations

import logging
from typing import Any

import httpx

from .settings import ClientSettings


logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Transport failure, timeout or non-2xx answer from a remote procedure."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RpcClient:
    """
    Remote procedure backend for AuthGateway.

    Every procedure answers {"data": ...}; None is a valid result
    ("no such user", "invalid session"), so callers must not read it as an
    error. Pass transport= (e.g. httpx.WSGITransport(app=app)) to talk to
    an in-process app.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        settings: ClientSettings | None = None,
    ):
        settings = settings or ClientSettings.from_env()
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.rpc_timeout,
            transport=transport,
        )

    def call(self, name: str, bearer: str | None = None, **args: Any) -> Any:
        headers = {"Content-Type": "application/json"}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        try:
            response = self.client.post(f"/rpc/{name}", json=args, headers=headers)
        except httpx.TimeoutException as e:
            raise RpcError(f"{name} timed out") from e
        except httpx.HTTPError as e:
            raise RpcError(f"{name} failed: {e}") from e

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = (body.get("error") if isinstance(body, dict) else None) or response.text
            logger.debug("RPC %s answered %s: %s", name, response.status_code, message)
            raise RpcError(f"{name} failed: {message}", status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise RpcError(f"{name} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise RpcError(f"{name} returned {type(body).__name__}, expected an object")
        return body.get("data")

    # -- Procedures --

    def authenticate(self, email: str, password: str) -> dict | None:
        return self.call("authenticate", email=email, password=password)

    def validate_session(self, token: str) -> dict | None:
        return self.call("validate_session", token=token)

    def logout(self, token: str) -> None:
        self.call("logout", token=token)

    def get_permissions(self, user_id: int, token: str | None = None) -> list[dict]:
        return self.call("get_permissions", bearer=token, user_id=user_id) or []

    def close(self) -> None:
        self.client.close()
