from typing import Awaitable, Callable

import httpx
import pytest

from appserver_mcp.client import AppserverApiClient
from appserver_mcp.platform import PlatformService
from appserver_mcp.settings import Settings

TOKEN = "token-abc"
BASE_URL = "http://appserver.local"

Handler = Callable[[httpx.Request], Awaitable[httpx.Response]]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        platform_url="http://platform.local/connect/token",
        platform_username="svc-user",
        platform_password="secret",
        platform_client_id="client-1",
        appserver_base_url=BASE_URL,
        data_rows_page_delay=0,
    )


def build_platform(settings: Settings, token: str = TOKEN) -> PlatformService:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": token, "token_type": "Bearer"})

    return PlatformService(httpx.AsyncClient(transport=httpx.MockTransport(handler)), settings)


def build_api_client(handler: Handler, settings: Settings) -> AppserverApiClient:
    async_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return AppserverApiClient(async_client, build_platform(settings))


@pytest.fixture
def make_client(settings: Settings):
    def _factory(handler: Handler) -> AppserverApiClient:
        return build_api_client(handler, settings)

    return _factory


@pytest.fixture
def token() -> str:
    return TOKEN
