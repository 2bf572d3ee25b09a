"""HTTP controllers served alongside the MCP endpoint: welcome page and health probes."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from appserver_mcp import __version__
from appserver_mcp.tools import AppserverToolDependencies

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AppserverHealthStatus:
    is_healthy: bool
    version: str | None = None
    models_count: int = 0
    models_up: int = 0
    error: str | None = None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_appserver_health(dependencies: AppserverToolDependencies) -> AppserverHealthStatus:
    """Probe the backend through ``/about`` and count the models reported as up."""
    service = dependencies.appserver_service
    if service is None:
        return AppserverHealthStatus(is_healthy=False, error="AppserverService not initialized")
    try:
        about = await service.get_about()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Appserver health probe failed", exc_info=True)
        return AppserverHealthStatus(is_healthy=False, error=str(exc))
    if about is None:
        return AppserverHealthStatus(is_healthy=False, error="Unable to connect to Appserver")
    return AppserverHealthStatus(
        is_healthy=True,
        version=about.app_server_version,
        models_count=len(about.models),
        models_up=sum(1 for model in about.models if model.status.lower() == "up"),
    )


def register_http_routes(
    mcp: FastMCP,
    dependencies: AppserverToolDependencies,
    *,
    environment: str = "Production",
) -> None:
    """Attach the welcome and health endpoints to the FastMCP HTTP app."""
    started_at = time.monotonic()

    def _base_info() -> dict[str, Any]:
        return {
            "timestamp": _timestamp(),
            "uptime": round(time.monotonic() - started_at, 3),
            "version": __version__,
            "environment": environment,
        }

    @mcp.custom_route("/", methods=["GET"])
    async def root(request: Request) -> JSONResponse:
        logger.info("Root endpoint accessed")
        return JSONResponse(
            {
                "message": "Welcome to AppserverMCP API",
                "version": __version__,
                "timestamp": _timestamp(),
            }
        )

    @mcp.custom_route("/api/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        try:
            payload = {"status": "Healthy", **_base_info()}
        except Exception as exc:  # noqa: BLE001
            logger.exception("Health check failed")
            return JSONResponse(
                {"status": "Unhealthy", "timestamp": _timestamp(), "error": str(exc)},
                status_code=500,
            )
        logger.info("Health check requested - Status: Healthy")
        return JSONResponse(payload)

    @mcp.custom_route("/api/health/detailed", methods=["GET"])
    async def detailed_health(request: Request) -> JSONResponse:
        try:
            started = time.perf_counter()
            backend = await check_appserver_health(dependencies)
            elapsed_ms = (time.perf_counter() - started) * 1000
            payload = {
                "status": "Healthy" if backend.is_healthy else "Degraded",
                **_base_info(),
                "response_time_ms": round(elapsed_ms, 3),
                "backends": {
                    "appserver": {
                        "status": "Healthy" if backend.is_healthy else "Unhealthy",
                        "version": backend.version,
                        "models_count": backend.models_count,
                        "models_up": backend.models_up,
                        "error": backend.error,
                    }
                },
            }
        except Exception as exc:  # noqa: BLE001
            logger.exception("Detailed health check failed")
            return JSONResponse(
                {"status": "Unhealthy", "timestamp": _timestamp(), "error": str(exc)},
                status_code=500,
            )
        logger.info(
            "Detailed health check completed - Status: %s, Backend: %s",
            payload["status"],
            payload["backends"]["appserver"]["status"],
        )
        return JSONResponse(payload, status_code=200 if backend.is_healthy else 503)

    @mcp.custom_route("/api/health/ready", methods=["GET"])
    async def readiness(request: Request) -> JSONResponse:
        try:
            backend = await check_appserver_health(dependencies)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Readiness check failed")
            return JSONResponse(
                {"status": "Not Ready", "timestamp": _timestamp(), "error": str(exc)},
                status_code=503,
            )
        if backend.is_healthy:
            return JSONResponse({"status": "Ready", "timestamp": _timestamp()})
        return JSONResponse(
            {
                "status": "Not Ready",
                "timestamp": _timestamp(),
                "reason": "Backend Appserver not accessible",
            },
            status_code=503,
        )

    @mcp.custom_route("/api/health/live", methods=["GET"])
    async def liveness(request: Request) -> JSONResponse:
        return JSONResponse({"status": "Alive", "timestamp": _timestamp()})

    logger.info("HTTP health routes registered.")
