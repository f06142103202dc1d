from .auth_gateway import CONNECTION_ERROR, INVALID_CREDENTIALS, AuthGateway, AuthResult
from .navigation import NavigationShell
from .rpc_client import RpcClient, RpcError
from .session_store import SESSION_TOKEN_KEY, FileSessionStore, MemorySessionStore
from .settings import ClientSettings

__all__ = [
    "AuthGateway",
    "AuthResult",
    "CONNECTION_ERROR",
    "INVALID_CREDENTIALS",
    "NavigationShell",
    "RpcClient",
    "RpcError",
    "SESSION_TOKEN_KEY",
    "FileSessionStore",
    "MemorySessionStore",
    "ClientSettings",
]
