"""Bearer token acquisition against the identity platform."""

import json
import logging
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ValidationError

from appserver_mcp.errors import PlatformAuthError
from appserver_mcp.settings import Settings

logger = logging.getLogger(__name__)


class TokenResponse(BaseModel):
    """Token payload returned by the platform's password grant."""

    access_token: str
    token_type: str | None = None
    expires_in: str | int | None = None
    refresh_token: str | None = None
    id_token: str | None = None


@dataclass(slots=True)
class PlatformService:
    """Exchanges the configured credentials for an Appserver bearer token."""

    _client: httpx.AsyncClient
    _settings: Settings

    async def aclose(self) -> None:
        await self._client.aclose()

    def _form_data(self) -> dict[str, str]:
        return {
            "username": self._settings.platform_username,
            "password": self._settings.platform_password,
            "grant_type": "password",
            "scope": self._settings.token_scope,
            "client_id": self._settings.platform_client_id,
            "response_type": "token id_token",
        }

    async def get_access_token(self) -> str:
        """Request a fresh access token using the resource owner password grant."""
        url = self._settings.platform_url
        try:
            response = await self._client.post(url, data=self._form_data())
        except httpx.TimeoutException as exc:
            logger.error("Token request timed out", extra={"url": url}, exc_info=exc)
            raise PlatformAuthError("Token request to the platform timed out.") from exc
        except httpx.RequestError as exc:
            logger.error("Token request failed", extra={"url": url}, exc_info=exc)
            raise PlatformAuthError(f"Token request to the platform failed: {exc!s}") from exc

        if response.is_error:
            logger.warning(
                "Platform rejected token request",
                extra={"url": url, "status_code": response.status_code},
            )
            raise PlatformAuthError(
                f"Platform token request failed with status {response.status_code}.",
                status_code=response.status_code,
            )

        try:
            token = TokenResponse.model_validate(response.json())
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            logger.error("Failed to deserialize token response", extra={"url": url})
            raise PlatformAuthError("Failed to deserialize token response.") from exc

        return token.access_token
