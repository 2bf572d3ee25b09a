"""HTTP client factories for the Appserver and the token platform."""

import httpx

from appserver_mcp.settings import Settings


def create_appserver_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build an AsyncClient configured for the Appserver REST API.

    Certificate validation follows APPSERVER_VERIFY_SSL; Appserver
    installations commonly run on self-signed certificates.
    """
    return httpx.AsyncClient(
        base_url=settings.appserver_base_url,
        timeout=settings.api_timeout,
        verify=settings.verify_ssl,
    )


def create_platform_client(settings: Settings) -> httpx.AsyncClient:
    """Build an AsyncClient used for token requests against the platform."""
    return httpx.AsyncClient(timeout=settings.api_timeout)
