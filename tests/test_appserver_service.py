import json

import httpx
import pytest

from appserver_mcp.services import AppserverService

ABOUT = {
    "app_server_version": "2024.1.0",
    "models": [
        {"model_id": "EA2_800", "version": "1", "status": "Up", "modeldata_timestamp": 1700000000, "is_real_time": False},
        {"model_id": "EA4IT", "version": "2", "status": "UP", "modeldata_timestamp": 1710000000, "is_real_time": True},
        {"model_id": "EA3", "version": "3", "status": "Down", "modeldata_timestamp": 1600000000, "is_real_time": False},
    ],
}


@pytest.mark.anyio
async def test_get_about_parses_models(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/about"
        return httpx.Response(200, json=ABOUT)

    client = make_client(handler)
    about = await AppserverService(client).get_about()
    assert about is not None
    assert about.app_server_version == "2024.1.0"
    assert [model.model_id for model in about.models] == ["EA2_800", "EA4IT", "EA3"]
    await client.aclose()


@pytest.mark.anyio
async def test_model_statistics_are_derived_from_about(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=ABOUT)

    client = make_client(handler)
    stats = await AppserverService(client).get_model_statistics()
    assert stats == {
        "total_models": 3,
        "models_up": 2,
        "models_down": 1,
        "real_time_models": 1,
        "batch_models": 2,
        "latest_model_timestamp": 1710000000,
    }
    await client.aclose()


@pytest.mark.anyio
async def test_model_statistics_without_models(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"app_server_version": "1", "models": []})

    client = make_client(handler)
    stats = await AppserverService(client).get_model_statistics()
    assert stats is not None
    assert stats["total_models"] == 0
    assert stats["latest_model_timestamp"] == 0
    await client.aclose()


@pytest.mark.anyio
async def test_failures_return_none(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    client = make_client(handler)
    service = AppserverService(client)
    assert await service.get_about() is None
    assert await service.get_model_statistics() is None
    assert await service.get_tasks() is None
    assert await service.get_users() is None
    assert await service.get_license() is None
    assert await service.get_comprehensive_models() is None
    await client.aclose()


@pytest.mark.anyio
async def test_invalid_payload_returns_none(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"header": {"total": "many"}, "business_processes": []})

    client = make_client(handler)
    assert await AppserverService(client).get_business_processes() is None
    await client.aclose()


@pytest.mark.anyio
async def test_body_that_is_not_utf8_returns_none(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"app_server_version": "\xff\xfe"}')

    client = make_client(handler)
    assert await AppserverService(client).get_about() is None
    await client.aclose()


@pytest.mark.anyio
async def test_execute_task_posts_default_reason(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/tasks/42/execution"
        assert json.loads(request.content.decode()) == {"start": True, "reason": "Automated execution"}
        return httpx.Response(200, json={"task_id": "42", "status": "running", "message": "started"})

    client = make_client(handler)
    result = await AppserverService(client).execute_task("42")
    assert result is not None
    assert result.status == "running"
    await client.aclose()


@pytest.mark.anyio
async def test_execute_task_forwards_reason(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content.decode())["reason"] == "month end"
        return httpx.Response(200, json={"task_id": "42", "status": "running"})

    client = make_client(handler)
    assert await AppserverService(client).execute_task("42", "month end") is not None
    await client.aclose()


@pytest.mark.anyio
async def test_get_task_status(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/tasks/42"
        return httpx.Response(200, json={"task_id": "42", "status": "finished", "progress": 100})

    client = make_client(handler)
    status = await AppserverService(client).get_task_status("42")
    assert status is not None
    assert status.progress == 100
    await client.aclose()


@pytest.mark.anyio
async def test_get_tasks_returns_task_list(make_client) -> None:
    payload = {
        "header": {"total": 1, "limit": 30, "offset": 0},
        "tasks": [
            {
                "id": "t1",
                "name": "Nightly refresh",
                "enabled": True,
                "triggers": [{"trigger_type": "schedule", "days": [{"day": 1, "active": True}]}],
                "actions": [{"action_type": "refresh_model", "arguments": [{"name": "model", "value": "EA2_800"}]}],
                "created": {"user": "admin", "datetime": 1700000000, "full_name": "Admin"},
                "custom_field": "kept",
            }
        ],
    }

    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    client = make_client(handler)
    tasks = await AppserverService(client).get_tasks()
    assert tasks is not None
    assert len(tasks) == 1
    assert tasks[0].triggers[0].days[0].active is True
    assert tasks[0].actions[0].arguments[0].value == "EA2_800"
    assert tasks[0].model_dump()["custom_field"] == "kept"
    await client.aclose()


@pytest.mark.anyio
async def test_get_users_returns_user_list(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "header": {"total": 2},
                "users": [{"id": "1", "username": "alice"}, {"id": "2", "username": "bob", "is_admin": True}],
            },
        )

    client = make_client(handler)
    users = await AppserverService(client).get_users()
    assert users is not None
    assert [user.username for user in users] == ["alice", "bob"]
    assert users[1].is_admin is True
    await client.aclose()


@pytest.mark.anyio
async def test_get_license_passes_payload_through(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/system/license"
        return httpx.Response(200, json={"expires": "2030-01-01", "modules": ["a", "b"]})

    client = make_client(handler)
    assert await AppserverService(client).get_license() == {"expires": "2030-01-01", "modules": ["a", "b"]}
    await client.aclose()


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(200, "Healthy"), (503, "Unhealthy - Status Code: 503")],
)
async def test_server_status(make_client, status_code: int, expected: str) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/health"
        return httpx.Response(status_code)

    client = make_client(handler)
    assert await AppserverService(client).get_server_status() == expected
    await client.aclose()


@pytest.mark.anyio
async def test_server_status_reports_transport_errors(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    status = await AppserverService(client).get_server_status()
    assert status.startswith("Error - ")
    assert "connection refused" in status
    await client.aclose()


@pytest.mark.anyio
async def test_model_classes_follow_model_uri(make_client) -> None:
    seen: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path == "/models/1":
            return httpx.Response(200, json={"id": "EA2_800", "uri": "/models/1", "classes": "models/1/classes"})
        assert request.url.params["offset"] == "10"
        assert request.url.params["limit"] == "5"
        return httpx.Response(
            200,
            json={
                "header": {"total": 120, "offset": 10, "limit": 5},
                "classes": [{"id": "PurchaseOrder", "short_name": "PO", "long_name": "Purchase Order"}],
            },
        )

    client = make_client(handler)
    classes = await AppserverService(client).get_model_classes("1", offset=10, limit=5)
    assert classes is not None
    assert classes.header.total == 120
    assert classes.classes[0].long_name == "Purchase Order"
    assert seen == ["/models/1", "/models/1/classes"]
    await client.aclose()


@pytest.mark.anyio
async def test_model_classes_fall_back_to_conventional_uri(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/models/3":
            return httpx.Response(200, json={"id": "EA3"})
        assert request.url.path == "/models/3/classes"
        return httpx.Response(200, json={"header": {"total": 0}, "classes": []})

    client = make_client(handler)
    classes = await AppserverService(client).get_model_classes("3")
    assert classes is not None
    assert classes.classes == []
    await client.aclose()


@pytest.mark.anyio
async def test_comprehensive_models_are_scraped(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/comprehensive_models"
        return httpx.Response(
            200,
            text="<table>\n<tr><td>EA2_800</td><td>SAP</td><td>Up</td><td>7</td><td>1</td><td>no</td></tr>\n</table>",
            headers={"content-type": "text/html"},
        )

    client = make_client(handler)
    records = await AppserverService(client).get_comprehensive_models()
    assert records is not None
    assert [record.model_id for record in records] == ["EA2_800"]
    await client.aclose()


@pytest.mark.anyio
async def test_get_models(make_client) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/models"
        return httpx.Response(
            200,
            json={"header": {"total": 1}, "models": [{"id": "EA2_800", "uri": "/models/1", "classes": "/models/1/classes"}]},
        )

    client = make_client(handler)
    models = await AppserverService(client).get_models()
    assert models is not None
    assert models.models[0].classes == "/models/1/classes"
    await client.aclose()
