import pytest

from appserver_mcp.settings import Settings

_ENV_VARS = (
    "APPSERVER_BASE_URL",
    "APPSERVER_VERIFY_SSL",
    "PLATFORM_URL",
    "PLATFORM_USERNAME",
    "PLATFORM_PASSWORD",
    "PLATFORM_CLIENT_ID",
    "PLATFORM_SCOPE",
    "API_TIMEOUT",
    "MCP_HOST",
    "MCP_HTTP_PORT",
    "MCP_TRANSPORT",
    "DATA_ROWS_PAGE_SIZE",
    "DATA_ROWS_MAX_ROWS",
    "DATA_ROWS_PAGE_DELAY",
    "APP_ENV",
)


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    monkeypatch.chdir(tmp_path)
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PLATFORM_URL", "https://platform.local/connect/token")
    monkeypatch.setenv("PLATFORM_USERNAME", "svc-user")
    monkeypatch.setenv("PLATFORM_PASSWORD", "secret")
    monkeypatch.setenv("PLATFORM_CLIENT_ID", "client-1")
    return monkeypatch


def test_defaults(env: pytest.MonkeyPatch) -> None:
    settings = Settings.load()
    assert settings.appserver_base_url == "http://localhost:8080"
    assert settings.api_timeout == 30.0
    assert settings.verify_ssl is False
    assert settings.mcp_http_port == 8000
    assert settings.mcp_transport == "http"
    assert settings.data_rows_page_size == 300
    assert settings.data_rows_max_rows == 1000
    assert settings.data_rows_page_delay == 0.5
    assert settings.environment == "Production"
    assert settings.token_scope == "openid offline_access client-1"


def test_overrides(env: pytest.MonkeyPatch) -> None:
    env.setenv("APPSERVER_BASE_URL", "https://appserver.local:9080/")
    env.setenv("APPSERVER_VERIFY_SSL", "yes")
    env.setenv("PLATFORM_SCOPE", "openid")
    env.setenv("MCP_TRANSPORT", "SSE")
    env.setenv("DATA_ROWS_PAGE_DELAY", "0")
    settings = Settings.load()
    assert settings.appserver_base_url == "https://appserver.local:9080"
    assert settings.verify_ssl is True
    assert settings.token_scope == "openid"
    assert settings.mcp_transport == "sse"
    assert settings.data_rows_page_delay == 0


def test_missing_credentials_rejected(env: pytest.MonkeyPatch) -> None:
    env.delenv("PLATFORM_PASSWORD")
    with pytest.raises(ValueError, match="PLATFORM_PASSWORD"):
        Settings.load()


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("API_TIMEOUT", "soon"),
        ("API_TIMEOUT", "0"),
        ("MCP_HTTP_PORT", "-1"),
        ("DATA_ROWS_PAGE_SIZE", "many"),
        ("DATA_ROWS_PAGE_DELAY", "-0.5"),
        ("APPSERVER_VERIFY_SSL", "maybe"),
        ("MCP_TRANSPORT", "stdio"),
    ],
)
def test_invalid_values_rejected(env: pytest.MonkeyPatch, name: str, value: str) -> None:
    env.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Settings.load()
