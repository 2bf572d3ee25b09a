from starlette.applications import Starlette

from appserver_mcp.server import build_server
from appserver_mcp.settings import Settings


def test_startup_attaches_services_and_shutdown_releases_them(settings: Settings) -> None:
    server = build_server(settings)
    assert server.dependencies.appserver_service is None

    server.startup()
    assert server.dependencies.appserver_service is not None
    assert server.dependencies.angle_service is not None

    server.shutdown()
    assert server.dependencies.appserver_service is None
    assert server.dependencies.angle_service is None


def test_http_app_is_starlette(settings: Settings) -> None:
    server = build_server(settings)
    assert isinstance(server.http_app(), Starlette)
