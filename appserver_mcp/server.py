"""
Core server bootstrap for the Appserver MCP gateway.

Wires the FastMCP instance, registers the MCP tools and HTTP health routes,
and serves the resulting Starlette app through uvicorn.
"""

import asyncio
import logging

import uvicorn
from fastmcp import FastMCP  # type: ignore[import-not-found]
from starlette.applications import Starlette
from starlette.middleware import Middleware

from appserver_mcp.client import AppserverApiClient
from appserver_mcp.middleware import RequestLoggingMiddleware
from appserver_mcp.routes import register_http_routes
from appserver_mcp.services import AngleService, AppserverService
from appserver_mcp.settings import Settings
from appserver_mcp.tools import AppserverToolDependencies, register_appserver_tools


class ServerApp:
    """Server container holding settings, the API client and the FastMCP app."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._api_client: AppserverApiClient | None = None
        self._dependencies = AppserverToolDependencies()
        self._mcp_app = FastMCP(
            name="Appserver MCP Server",
            instructions=(
                "Inspect the Appserver business-intelligence backend: models, tasks, users, "
                "business processes, angles, dashboards and executed display results."
            ),
        )
        register_appserver_tools(self._mcp_app, self._dependencies)
        register_http_routes(
            self._mcp_app,
            self._dependencies,
            environment=settings.environment,
        )

    def startup(self) -> None:
        """Create the HTTP clients and hand the services to tools and routes."""
        self._logger.info("Starting server bootstrap")
        self._api_client = AppserverApiClient.from_settings(self._settings)
        self._dependencies.attach_services(
            AppserverService(self._api_client),
            AngleService.from_settings(self._api_client, self._settings),
        )

    def shutdown(self) -> None:
        """Release acquired resources."""
        self._logger.info("Shutting down server bootstrap")
        if self._api_client is not None:
            asyncio.run(self._api_client.aclose())
            self._api_client = None
        self._dependencies.detach_services()

    def http_app(self) -> Starlette:
        """Build the Starlette app for the configured transport with request logging."""
        return self._mcp_app.http_app(
            transport=self._settings.mcp_transport,
            middleware=[Middleware(RequestLoggingMiddleware)],
        )

    def _uvicorn_server(self, host: str) -> uvicorn.Server:
        config = uvicorn.Config(
            self.http_app(),
            host=host,
            port=self._settings.mcp_http_port,
            log_level="warning",
        )
        return uvicorn.Server(config)

    def serve_forever(self) -> None:
        """Run the HTTP server until interrupted."""
        host = self._settings.mcp_host
        port = self._settings.mcp_http_port
        self._logger.info(
            "Starting %s transport",
            self._settings.mcp_transport,
            extra={"host": host, "port": port},
        )
        self._uvicorn_server(host).run()

    async def serve_async(self, host: str | None = None) -> None:
        """Async helper for running the HTTP server (used by smoke tests)."""
        await self._uvicorn_server(host or self._settings.mcp_host).serve()

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app

    @property
    def dependencies(self) -> AppserverToolDependencies:
        return self._dependencies


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
