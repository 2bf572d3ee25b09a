"""Entry point for the Appserver MCP gateway."""

import logging
import os

from appserver_mcp.server import build_server
from appserver_mcp.settings import Settings


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    """Bootstrap and run the HTTP server."""
    _configure_logging()
    logger = logging.getLogger("appserver-mcp")
    settings = Settings.load()
    server = build_server(settings)

    try:
        server.startup()
        mcp_path = "/sse" if settings.mcp_transport == "sse" else "/mcp"
        logger.info(
            "Appserver MCP server ready at http://localhost:%s%s (health at /api/health)",
            settings.mcp_http_port,
            mcp_path,
        )
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    except Exception:
        logger.exception("Server stopped due to an unexpected error.")
        raise
    finally:
        server.shutdown()
        logger.info("Server shutdown complete.")


if __name__ == "__main__":
    main()
