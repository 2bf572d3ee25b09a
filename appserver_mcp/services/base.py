"""Shared fetch-and-validate helpers for the Appserver services."""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from appserver_mcp.client import AppserverApiClient
from appserver_mcp.errors import AppserverApiError

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseService:
    """Wraps the API client so failures surface as ``None`` instead of exceptions."""

    def __init__(self, client: AppserverApiClient, logger: logging.Logger) -> None:
        self._client = client
        self._logger = logger

    async def _get(
        self,
        path: str,
        model: type[ModelT],
        action: str,
        **kwargs: Any,
    ) -> ModelT | None:
        try:
            payload = await self._client.get_json(path, **kwargs)
        except AppserverApiError as exc:
            self._logger.error("Failed to %s: %s", action, exc)
            return None
        return self._validate(payload, model, action)

    async def _post(
        self,
        path: str,
        body: BaseModel,
        model: type[ModelT],
        action: str,
        **kwargs: Any,
    ) -> ModelT | None:
        payload_out = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            payload = await self._client.post_json(path, payload_out, **kwargs)
        except AppserverApiError as exc:
            self._logger.error("Failed to %s: %s", action, exc)
            return None
        return self._validate(payload, model, action)

    def _validate(self, payload: Any, model: type[ModelT], action: str) -> ModelT | None:
        if payload is None:
            self._logger.warning("Empty response while trying to %s", action)
            return None
        try:
            return model.model_validate(payload)
        except ValidationError:
            self._logger.error("Failed to parse response while trying to %s", action, exc_info=True)
            return None
