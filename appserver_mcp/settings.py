"""Environment-driven configuration utilities for the Appserver MCP gateway."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

_TRANSPORTS = ("http", "streamable-http", "sse")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _read_required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required but was not provided.")
    return value


def _read_float(name: str, default: str, *, allow_zero: bool = False) -> float:
    raw = os.getenv(name, "").strip() or default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a numeric value.") from exc
    if value < 0 or (value == 0 and not allow_zero):
        bound = "zero or greater" if allow_zero else "greater than zero"
        raise ValueError(f"{name} must be {bound}.")
    return value


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, "").strip() or default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


def _read_bool(name: str, default: str) -> bool:
    raw = (os.getenv(name, "").strip() or default).lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value (true/false).")


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    platform_url: str
    platform_username: str
    platform_password: str
    platform_client_id: str
    platform_scope: str = ""
    appserver_base_url: str = "http://localhost:8080"
    api_timeout: float = 30.0
    verify_ssl: bool = False
    mcp_host: str = "0.0.0.0"
    mcp_http_port: int = 8000
    mcp_transport: str = "http"
    data_rows_page_size: int = 300
    data_rows_max_rows: int = 1000
    data_rows_page_delay: float = 0.5
    environment: str = "Production"

    @property
    def token_scope(self) -> str:
        """Scope requested with every token; defaults to the client id scope."""
        return self.platform_scope or f"openid offline_access {self.platform_client_id}"

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally.
        """
        load_dotenv()

        mcp_transport = (os.getenv("MCP_TRANSPORT", "").strip() or "http").lower()
        if mcp_transport not in _TRANSPORTS:
            raise ValueError(f"MCP_TRANSPORT must be one of: {', '.join(_TRANSPORTS)}.")

        appserver_base_url = os.getenv("APPSERVER_BASE_URL", "").strip() or "http://localhost:8080"

        return cls(
            platform_url=_read_required("PLATFORM_URL"),
            platform_username=_read_required("PLATFORM_USERNAME"),
            platform_password=_read_required("PLATFORM_PASSWORD"),
            platform_client_id=_read_required("PLATFORM_CLIENT_ID"),
            platform_scope=os.getenv("PLATFORM_SCOPE", "").strip(),
            appserver_base_url=appserver_base_url.rstrip("/"),
            api_timeout=_read_float("API_TIMEOUT", "30"),
            verify_ssl=_read_bool("APPSERVER_VERIFY_SSL", "false"),
            mcp_host=os.getenv("MCP_HOST", "").strip() or "0.0.0.0",
            mcp_http_port=_read_int("MCP_HTTP_PORT", "8000"),
            mcp_transport=mcp_transport,
            data_rows_page_size=_read_int("DATA_ROWS_PAGE_SIZE", "300"),
            data_rows_max_rows=_read_int("DATA_ROWS_MAX_ROWS", "1000"),
            data_rows_page_delay=_read_float("DATA_ROWS_PAGE_DELAY", "0.5", allow_zero=True),
            environment=os.getenv("APP_ENV", "").strip() or "Production",
        )
