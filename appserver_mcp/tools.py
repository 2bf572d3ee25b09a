"""MCP tool registrations for the Appserver gateway."""

import json
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Awaitable, Callable, TypeVar

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from appserver_mcp.models import AngleFilterRequest
from appserver_mcp.search import AngleSearchRequest, build_filter_queries
from appserver_mcp.services import AngleService, AppserverService

logger = logging.getLogger(__name__)

ServiceT = TypeVar("ServiceT")


@dataclass
class AppserverToolDependencies:
    """Runtime dependencies required by the MCP tools and HTTP routes."""

    appserver_service: AppserverService | None = None
    angle_service: AngleService | None = None

    def attach_services(self, appserver_service: AppserverService, angle_service: AngleService) -> None:
        self.appserver_service = appserver_service
        self.angle_service = angle_service

    def detach_services(self) -> None:
        self.appserver_service = None
        self.angle_service = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def to_json(value: Any) -> str:
    """Serialize a service result into the JSON string handed back to tool callers."""
    return json.dumps(_jsonable(value))


def error_json(message: str) -> str:
    return json.dumps({"error": message})


def register_appserver_tools(
    mcp: FastMCP,
    dependencies: AppserverToolDependencies,
) -> None:
    """Register MCP tools that proxy to the Appserver REST API."""

    def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
        logger.info(
            "appserver_tool_event",
            extra={"tool": tool_name, "event": event, **fields},
        )

    async def _invoke(
        tool_name: str,
        service: ServiceT | None,
        service_label: str,
        action: Callable[[ServiceT], Awaitable[Any]],
        *,
        failure: str,
        error_prefix: str,
        invalid: str | None = None,
    ) -> str:
        if service is None:
            return error_json(f"{service_label} not initialized")
        if invalid is not None:
            return error_json(invalid)
        try:
            result = await action(service)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s failed unexpectedly", tool_name)
            _log_tool_event(tool_name, "unexpected_error", error=str(exc))
            return error_json(f"{error_prefix}: {exc}")
        if result is None:
            _log_tool_event(tool_name, "no_result")
            return error_json(failure)
        _log_tool_event(tool_name, "success")
        return to_json(result)

    async def _appserver(
        tool_name: str,
        action: Callable[[AppserverService], Awaitable[Any]],
        *,
        failure: str,
        error_prefix: str,
        invalid: str | None = None,
    ) -> str:
        return await _invoke(
            tool_name,
            dependencies.appserver_service,
            "AppserverService",
            action,
            failure=failure,
            error_prefix=error_prefix,
            invalid=invalid,
        )

    async def _angles(
        tool_name: str,
        action: Callable[[AngleService], Awaitable[Any]],
        *,
        failure: str,
        error_prefix: str,
        invalid: str | None = None,
    ) -> str:
        return await _invoke(
            tool_name,
            dependencies.angle_service,
            "AngleService",
            action,
            failure=failure,
            error_prefix=error_prefix,
            invalid=invalid,
        )

    # System

    @mcp.tool(
        name="get_appserver_about",
        description="Get comprehensive information about the Appserver including version and all available models with their status.",
    )
    async def get_appserver_about() -> str:
        return await _appserver(
            "get_appserver_about",
            lambda service: service.get_about(),
            failure="Failed to retrieve Appserver information. The server may be unavailable.",
            error_prefix="Error retrieving Appserver information",
        )

    @mcp.tool(
        name="get_server_status",
        description="Check whether the Appserver health endpoint responds successfully.",
    )
    async def get_server_status() -> str:
        async def _call(service: AppserverService) -> dict[str, str]:
            return {"status": await service.get_server_status()}

        return await _appserver(
            "get_server_status",
            _call,
            failure="Failed to check Appserver status.",
            error_prefix="Error checking Appserver status",
        )

    @mcp.tool(
        name="get_model_statistics",
        description="Summarize the Appserver models: how many are up or down, real-time or batch, and the latest model data timestamp.",
    )
    async def get_model_statistics() -> str:
        return await _appserver(
            "get_model_statistics",
            lambda service: service.get_model_statistics(),
            failure="Failed to compute model statistics. The server may be unavailable.",
            error_prefix="Error computing model statistics",
        )

    @mcp.tool(name="get_license", description="Get the Appserver license information.")
    async def get_license() -> str:
        return await _appserver(
            "get_license",
            lambda service: service.get_license(),
            failure="Failed to retrieve license information. The server may be unavailable.",
            error_prefix="Error retrieving license information",
        )

    # Tasks

    @mcp.tool(name="get_tasks", description="Get list of all tasks from the Appserver.")
    async def get_tasks() -> str:
        return await _appserver(
            "get_tasks",
            lambda service: service.get_tasks(),
            failure="Failed to retrieve tasks list. The server may be unavailable.",
            error_prefix="Error retrieving tasks list",
        )

    @mcp.tool(name="get_task_status", description="Get current status and details of a task.")
    async def get_task_status(
        task_id: Annotated[str, Field(description="ID of the task to check.")],
    ) -> str:
        task_id_value = task_id.strip()
        return await _appserver(
            "get_task_status",
            lambda service: service.get_task_status(task_id_value),
            failure="Failed to retrieve task status. The server may be unavailable or the task ID may be invalid.",
            error_prefix="Error retrieving task status",
            invalid=None if task_id_value else "Task ID is required",
        )

    @mcp.tool(name="execute_task", description="Execute a task by ID.")
    async def execute_task(
        task_id: Annotated[str, Field(description="ID of the task to execute.")],
        reason: Annotated[str | None, Field(description="Optional reason for task execution.")] = None,
    ) -> str:
        task_id_value = task_id.strip()
        return await _appserver(
            "execute_task",
            lambda service: service.execute_task(task_id_value, reason),
            failure="Failed to execute task. The server may be unavailable or the task ID may be invalid.",
            error_prefix="Error executing task",
            invalid=None if task_id_value else "Task ID is required",
        )

    # Users and business processes

    @mcp.tool(name="get_users", description="Get list of all users from the Appserver.")
    async def get_users() -> str:
        return await _appserver(
            "get_users",
            lambda service: service.get_users(),
            failure="Failed to retrieve users list. The server may be unavailable.",
            error_prefix="Error retrieving users list",
        )

    @mcp.tool(
        name="get_business_processes",
        description="Get the business processes configured on the Appserver.",
    )
    async def get_business_processes() -> str:
        return await _appserver(
            "get_business_processes",
            lambda service: service.get_business_processes(),
            failure="Failed to retrieve business processes. The server may be unavailable.",
            error_prefix="Error retrieving business processes",
        )

    # Models

    @mcp.tool(name="get_models", description="List the models available on the Appserver.")
    async def get_models() -> str:
        return await _appserver(
            "get_models",
            lambda service: service.get_models(),
            failure="Failed to retrieve models. The server may be unavailable.",
            error_prefix="Error retrieving models",
        )

    @mcp.tool(
        name="get_model_classes",
        description="List the classes (object types) of a model.",
    )
    async def get_model_classes(
        model_id: Annotated[str, Field(description="ID of the model, e.g. '1'.")],
        offset: Annotated[int, Field(ge=0, description="Index of the first class to return.")] = 0,
        limit: Annotated[int, Field(ge=1, le=1000, description="Maximum number of classes to return.")] = 100,
    ) -> str:
        model_id_value = model_id.strip()
        return await _appserver(
            "get_model_classes",
            lambda service: service.get_model_classes(model_id_value, offset, limit),
            failure="Failed to retrieve model classes. The server may be unavailable or the model ID may be invalid.",
            error_prefix="Error retrieving model classes",
            invalid=None if model_id_value else "Model ID is required",
        )

    @mcp.tool(
        name="get_comprehensive_models",
        description="Get the detailed models overview (status, version and data timestamp per model).",
    )
    async def get_comprehensive_models() -> str:
        return await _appserver(
            "get_comprehensive_models",
            lambda service: service.get_comprehensive_models(),
            failure="Failed to retrieve the comprehensive models overview. The server may be unavailable.",
            error_prefix="Error retrieving comprehensive models",
        )

    # Angles

    @mcp.tool(
        name="search_angles",
        description="Search Appserver items (angles, dashboards) with a free-text query, optional field filters, paging, sorting, field selection, facets and highlighting.",
    )
    async def search_angles(
        query: Annotated[str, Field(description="Search query; '*:*' matches everything.")] = "*:*",
        filters: Annotated[
            list[AngleFilterRequest] | None,
            Field(description="Field filters; operator is one of equals, contains, startswith, endswith, range, not."),
        ] = None,
        start: Annotated[int, Field(ge=0, description="Index of the first item to return.")] = 0,
        rows: Annotated[int, Field(ge=0, le=1000, description="Number of items to return.")] = 10,
        sort: Annotated[str, Field(description="Sort expression, e.g. 'name asc'.")] = "",
        fields: Annotated[str, Field(description="Comma-separated fields to return; '*' returns all.")] = "*",
        facet_fields: Annotated[
            list[str] | None,
            Field(description="Fields to facet on, e.g. ['category', 'status']. Enables facet counts."),
        ] = None,
        highlight_fields: Annotated[
            str | None,
            Field(description="Comma-separated fields to highlight matches in. Enables highlighting."),
        ] = None,
    ) -> str:
        request = AngleSearchRequest(
            query=query.strip() or "*:*",
            filter_queries=build_filter_queries(filters or []),
            start=start,
            rows=rows,
            sort=sort,
            fields=fields.strip() or "*",
            facet=bool(facet_fields),
            facet_fields=list(facet_fields or []),
            highlight=bool(highlight_fields),
            highlight_fields=(highlight_fields or "").strip(),
        )
        return await _angles(
            "search_angles",
            lambda service: service.search_angles(request),
            failure="Failed to search items. The server may be unavailable.",
            error_prefix="Error searching items",
        )

    @mcp.tool(name="get_angles", description="List angles, optionally narrowed by a search query.")
    async def get_angles(
        query: Annotated[str | None, Field(description="Optional search text.")] = None,
    ) -> str:
        return await _angles(
            "get_angles",
            lambda service: service.get_angles(query),
            failure="Failed to retrieve angles. The server may be unavailable.",
            error_prefix="Error retrieving angles",
        )

    @mcp.tool(name="get_angle", description="Get a single angle by its ID.")
    async def get_angle(
        angle_id: Annotated[str, Field(description="ID of the angle.")],
    ) -> str:
        angle_id_value = angle_id.strip()
        return await _angles(
            "get_angle",
            lambda service: service.get_angle_by_id(angle_id_value),
            failure="Failed to retrieve angle. The server may be unavailable or the angle ID may be invalid.",
            error_prefix="Error retrieving angle",
            invalid=None if angle_id_value else "Angle ID is required",
        )

    @mcp.tool(
        name="get_angle_statistics",
        description="Summarize angles by category and status, including how many were created in the last 30 days.",
    )
    async def get_angle_statistics() -> str:
        return await _angles(
            "get_angle_statistics",
            lambda service: service.get_angle_statistics(),
            failure="Failed to compute angle statistics. The server may be unavailable.",
            error_prefix="Error computing angle statistics",
        )

    @mcp.tool(
        name="execute_angle_display",
        description="Execute a display of an angle. Returns the result whose 'uri' is used to poll status and fetch data.",
    )
    async def execute_angle_display(
        model_id: Annotated[int, Field(ge=1, description="Numeric model ID.")],
        angle_id: Annotated[int, Field(ge=1, description="Numeric angle ID.")],
        display_id: Annotated[int, Field(ge=1, description="Numeric display ID.")],
    ) -> str:
        return await _angles(
            "execute_angle_display",
            lambda service: service.execute_angle_display(model_id, angle_id, display_id),
            failure="Failed to execute angle display. The server may be unavailable or the IDs may be invalid.",
            error_prefix="Error executing angle display",
        )

    @mcp.tool(
        name="get_angle_display_status",
        description="Get the execution status of a result started by execute_angle_display.",
    )
    async def get_angle_display_status(
        result_uri: Annotated[str, Field(description="Result URI, e.g. '/results/15'.")],
    ) -> str:
        result_uri_value = result_uri.strip()
        return await _angles(
            "get_angle_display_status",
            lambda service: service.get_angle_display_execution_status(result_uri_value),
            failure="Failed to retrieve execution status. The server may be unavailable or the result URI may be invalid.",
            error_prefix="Error retrieving execution status",
            invalid=None if result_uri_value else "Result URI is required",
        )

    @mcp.tool(
        name="get_angle_result_data",
        description="Fetch the fields and data rows of a finished result, paging through rows up to a limit.",
    )
    async def get_angle_result_data(
        result_uri: Annotated[str, Field(description="Result URI, e.g. '/results/15'.")],
        max_rows: Annotated[int | None, Field(ge=0, description="Maximum number of rows to collect.")] = None,
    ) -> str:
        result_uri_value = result_uri.strip()
        return await _angles(
            "get_angle_result_data",
            lambda service: service.get_angle_result_data(result_uri_value, max_rows),
            failure="Failed to retrieve result data. The server may be unavailable or the result URI may be invalid.",
            error_prefix="Error retrieving result data",
            invalid=None if result_uri_value else "Result URI is required",
        )

    # Dashboards

    @mcp.tool(name="get_dashboards", description="List dashboards, optionally narrowed by a search query.")
    async def get_dashboards(
        query: Annotated[str | None, Field(description="Optional search text.")] = None,
    ) -> str:
        return await _angles(
            "get_dashboards",
            lambda service: service.get_dashboards(query),
            failure="Failed to retrieve dashboards. The server may be unavailable.",
            error_prefix="Error retrieving dashboards",
        )

    @mcp.tool(name="get_dashboard", description="Get a dashboard and its widget definitions by URI.")
    async def get_dashboard(
        dashboard_uri: Annotated[str, Field(description="Dashboard URI, e.g. '/dashboards/20'.")],
    ) -> str:
        dashboard_uri_value = dashboard_uri.strip()
        return await _angles(
            "get_dashboard",
            lambda service: service.get_dashboard_by_uri(dashboard_uri_value),
            failure="Failed to retrieve dashboard. The server may be unavailable or the URI may be invalid.",
            error_prefix="Error retrieving dashboard",
            invalid=None if dashboard_uri_value else "Dashboard URI is required",
        )

    logger.info("Appserver MCP tools registered.")
