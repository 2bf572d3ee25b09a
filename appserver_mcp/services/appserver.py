"""Appserver system, task, user, license and model endpoints."""

import logging
from typing import Any

from appserver_mcp.client import AppserverApiClient, normalize_uri
from appserver_mcp.errors import AppserverApiError
from appserver_mcp.models import (
    AboutOutputView,
    BusinessProcessResponse,
    ModelClassesResponse,
    ModelRecord,
    ModelsListResponse,
    ModelView,
    TaskExecutionRequest,
    TaskExecutionResponse,
    TaskItemView,
    TasksListResponse,
    TaskStatusResponse,
    UsersListResponse,
    UserView,
)
from appserver_mcp.scraper import parse_comprehensive_models
from appserver_mcp.services.base import BaseService

logger = logging.getLogger(__name__)

COMPREHENSIVE_MODELS_PATH = "/comprehensive_models"
DEFAULT_TASK_REASON = "Automated execution"


def _is_up(status: str) -> bool:
    return status.lower() == "up"


class AppserverService(BaseService):
    """Typed access to the Appserver's system-level resources."""

    def __init__(self, client: AppserverApiClient) -> None:
        super().__init__(client, logger)

    async def get_about(self) -> AboutOutputView | None:
        logger.info("Fetching about information")
        about = await self._get("/about", AboutOutputView, "fetch about information")
        if about is not None:
            logger.info(
                "Fetched about information for app server version %s",
                about.app_server_version,
            )
        return about

    async def get_business_processes(self) -> BusinessProcessResponse | None:
        logger.info("Fetching business processes")
        processes = await self._get(
            "/businessprocesses", BusinessProcessResponse, "fetch business processes"
        )
        if processes is not None:
            logger.info("Fetched %d business processes", len(processes.business_processes))
        return processes

    async def get_server_status(self) -> str:
        """Return a human-readable status line for the Appserver's ``/health`` endpoint."""
        logger.info("Checking Appserver health")
        try:
            status_code = await self._client.probe("/health")
        except AppserverApiError as exc:
            logger.error("Failed to check server status: %s", exc)
            return f"Error - {exc}"
        if 200 <= status_code < 300:
            return "Healthy"
        return f"Unhealthy - Status Code: {status_code}"

    async def get_model_statistics(self) -> dict[str, Any] | None:
        about = await self.get_about()
        if about is None:
            return None

        models = about.models
        up = sum(1 for model in models if _is_up(model.status))
        real_time = sum(1 for model in models if model.is_real_time)
        return {
            "total_models": len(models),
            "models_up": up,
            "models_down": len(models) - up,
            "real_time_models": real_time,
            "batch_models": len(models) - real_time,
            "latest_model_timestamp": max((m.modeldata_timestamp for m in models), default=0),
        }

    async def execute_task(
        self,
        task_id: str,
        reason: str | None = None,
    ) -> TaskExecutionResponse | None:
        reason_value = reason or DEFAULT_TASK_REASON
        logger.info("Executing task %s", task_id, extra={"task_id": task_id, "reason": reason_value})
        result = await self._post(
            f"/tasks/{task_id}/execution",
            TaskExecutionRequest(start=True, reason=reason_value),
            TaskExecutionResponse,
            f"execute task {task_id}",
        )
        if result is not None:
            logger.info("Executed task %s", task_id)
        return result

    async def get_task_status(self, task_id: str) -> TaskStatusResponse | None:
        logger.info("Fetching status for task %s", task_id)
        status = await self._get(
            f"/tasks/{task_id}", TaskStatusResponse, f"fetch status for task {task_id}"
        )
        if status is not None:
            logger.info("Task %s status: %s", task_id, status.status)
        return status

    async def get_tasks(self) -> list[TaskItemView] | None:
        logger.info("Fetching tasks list")
        response = await self._get("/tasks", TasksListResponse, "fetch tasks list")
        if response is None:
            return None
        logger.info("Fetched %d tasks (total: %d)", len(response.tasks), response.header.total)
        return response.tasks

    async def get_license(self) -> dict[str, Any] | None:
        logger.info("Fetching license information")
        try:
            payload = await self._client.get_json("/system/license")
        except AppserverApiError as exc:
            logger.error("Failed to fetch license information: %s", exc)
            return None
        if not isinstance(payload, dict):
            logger.error("Unexpected license payload type: %s", type(payload).__name__)
            return None
        return payload

    async def get_users(self) -> list[UserView] | None:
        logger.info("Fetching users list")
        response = await self._get("/users", UsersListResponse, "fetch users list")
        if response is None:
            return None
        logger.info("Fetched %d users (total: %d)", len(response.users), response.header.total)
        return response.users

    async def get_models(self) -> ModelsListResponse | None:
        logger.info("Fetching models")
        return await self._get("/models", ModelsListResponse, "fetch models")

    async def get_model(self, model_id: str) -> ModelView | None:
        return await self._get(f"/models/{model_id}", ModelView, f"fetch model {model_id}")

    async def get_model_classes(
        self,
        model_id: str,
        offset: int = 0,
        limit: int = 100,
    ) -> ModelClassesResponse | None:
        """Follow a model's ``classes`` URI and return one page of its classes."""
        model = await self.get_model(model_id)
        if model is None:
            return None
        classes_uri = normalize_uri(model.classes) if model.classes else f"/models/{model_id}/classes"
        logger.info("Fetching classes for model %s from %s", model_id, classes_uri)
        return await self._get(
            classes_uri,
            ModelClassesResponse,
            f"fetch classes for model {model_id}",
            params={"offset": offset, "limit": limit},
        )

    async def get_comprehensive_models(self) -> list[ModelRecord] | None:
        """Scrape the legacy HTML models overview."""
        logger.info("Fetching comprehensive models page")
        try:
            content = await self._client.get_text(COMPREHENSIVE_MODELS_PATH)
        except AppserverApiError as exc:
            logger.error("Failed to fetch comprehensive models: %s", exc)
            return None
        records = parse_comprehensive_models(content)
        logger.info("Parsed %d models from comprehensive models page", len(records))
        return records
