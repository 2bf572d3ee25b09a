"""
Appserver API client wrapper.

Every call acquires a bearer token from the platform, attaches the Appserver
authorization headers and normalizes transport, status and decoding failures
into AppserverApiError.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from appserver_mcp.errors import AppserverApiError
from appserver_mcp.http_client import create_appserver_client, create_platform_client
from appserver_mcp.platform import PlatformService
from appserver_mcp.settings import Settings

logger = logging.getLogger(__name__)

AUTH_HEADER = "A4SAuthorization"
ROPC_HEADER = "ROPC"
_SNIPPET_LIMIT = 512


def normalize_uri(uri: str) -> str:
    """Turn upstream URIs such as 'results/15' into '/results/15'."""
    cleaned = uri.strip()
    if not cleaned:
        raise ValueError("uri must be a non-empty string.")
    if cleaned.startswith(("http://", "https://", "/")):
        return cleaned
    return f"/{cleaned}"


@dataclass(slots=True)
class AppserverApiClient:
    """Typed wrapper around the shared AsyncClient."""

    _client: httpx.AsyncClient
    _platform: PlatformService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppserverApiClient":
        """Factory that builds the client and its token source from Settings."""
        platform = PlatformService(create_platform_client(settings), settings)
        return cls(create_appserver_client(settings), platform)

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()
        await self._platform.aclose()

    async def get_json(self, path: str, **kwargs: Any) -> Any:
        response = await self._request("GET", path, **kwargs)
        return self._decode(response, "GET", path)

    async def post_json(self, path: str, payload: Any, **kwargs: Any) -> Any:
        response = await self._request("POST", path, json=payload, **kwargs)
        return self._decode(response, "POST", path)

    async def get_text(self, path: str, **kwargs: Any) -> str:
        response = await self._request("GET", path, **kwargs)
        return response.text

    async def probe(self, path: str) -> int:
        """Return the status code of an authenticated GET without raising on error statuses."""
        response = await self._request("GET", path, raise_for_status=False)
        return response.status_code

    def _resolve(self, path: str) -> str:
        """Normalize ``path`` and refuse absolute URLs outside the Appserver origin."""
        path = normalize_uri(path)
        if path.startswith("/"):
            return path
        target = httpx.URL(path)
        base = self._client.base_url
        if (target.scheme, target.host, target.port) != (base.scheme, base.host, base.port):
            logger.warning(
                "Rejected request outside the Appserver origin",
                extra={"target_host": target.host},
            )
            raise AppserverApiError(
                f"Refusing to call {target.scheme}://{target.host}: only the configured Appserver may be addressed."
            )
        return path

    async def _auth_headers(self) -> dict[str, str]:
        token = await self._platform.get_access_token()
        return {AUTH_HEADER: token, ROPC_HEADER: "true"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Normalized request handler for all outgoing API calls."""
        path = self._resolve(path)

        def _transport_error(message: str, *, exc: Exception | None = None) -> AppserverApiError:
            logger.error(
                message,
                extra={"method": method, "path": path},
                exc_info=exc,
            )
            return AppserverApiError(message)

        headers = await self._auth_headers()
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(
                f"Appserver request timed out ({method} {path}).",
                exc=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise _transport_error(
                f"Appserver request failed ({method} {path}): {exc!s}",
                exc=exc,
            ) from exc

        if response.is_error and raise_for_status:
            snippet = response.text.strip()
            if len(snippet) > _SNIPPET_LIMIT:
                snippet = f"{snippet[:_SNIPPET_LIMIT]}..."
            logger.warning(
                "Appserver responded with error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "content": snippet,
                },
            )
            raise AppserverApiError(
                f"Appserver error ({response.status_code}) during {method} {path}: {snippet or 'no body provided.'}",
                status_code=response.status_code,
            )

        return response

    @staticmethod
    def _decode(response: httpx.Response, method: str, path: str) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.error(
                "Appserver returned invalid JSON",
                extra={"method": method, "path": path},
            )
            raise AppserverApiError(
                f"Appserver returned invalid JSON during {method} {path}."
            ) from exc
