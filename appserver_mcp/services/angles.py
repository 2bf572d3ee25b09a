"""Angle search, dashboards, display execution and result data."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from appserver_mcp.client import AppserverApiClient, normalize_uri
from appserver_mcp.models import (
    AngleDisplayExecutionStatus,
    AngleDocument,
    AngleFilterRequest,
    AngleResultData,
    AngleSearchResponse,
    AngleStatisticsResponse,
    DashboardResponse,
    DataFieldsResponse,
    DataRow,
    DataRowsHeader,
    DataRowsResponse,
    ExecuteAngleDisplayRequest,
    ExecuteAngleDisplayResponse,
    QueryDefinitionItem,
)
from appserver_mcp.search import (
    ANGLE_ITEM_FILTER,
    DASHBOARD_ITEM_FILTER,
    DEFAULT_ROWS,
    AngleSearchRequest,
    build_filter_queries,
    build_item_type_parameters,
    build_query_parameters,
    process_facet_list,
)
from appserver_mcp.services.base import BaseService
from appserver_mcp.settings import Settings

logger = logging.getLogger(__name__)

STATISTICS_FACETS = ("category", "status")
RECENT_WINDOW = timedelta(days=30)
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class AngleService(BaseService):
    """Typed access to angles, dashboards and executed display results."""

    def __init__(
        self,
        client: AppserverApiClient,
        *,
        page_size: int = 300,
        max_rows: int = 1000,
        page_delay: float = 0.5,
    ) -> None:
        super().__init__(client, logger)
        self._page_size = page_size
        self._max_rows = max_rows
        self._page_delay = page_delay

    @classmethod
    def from_settings(cls, client: AppserverApiClient, settings: Settings) -> "AngleService":
        return cls(
            client,
            page_size=settings.data_rows_page_size,
            max_rows=settings.data_rows_max_rows,
            page_delay=settings.data_rows_page_delay,
        )

    async def search_angles(self, request: AngleSearchRequest) -> AngleSearchResponse | None:
        params = build_query_parameters(request)
        logger.info("Searching items", extra={"params": params})
        response = await self._get("/items", AngleSearchResponse, "search items", params=params)
        if response is not None:
            logger.info("Search matched %d items", response.header.total)
        return response

    async def get_angle_by_id(self, angle_id: str) -> AngleDocument | None:
        logger.info("Getting angle by ID: %s", angle_id)
        return await self._get(f"/api/items/{angle_id}", AngleDocument, f"get angle {angle_id}")

    async def filter_angles(
        self,
        filters: list[AngleFilterRequest],
        start: int = 0,
        rows: int = DEFAULT_ROWS,
        sort: str = "",
    ) -> AngleSearchResponse | None:
        request = AngleSearchRequest(
            query="*:*",
            filter_queries=build_filter_queries(filters),
            start=start,
            rows=rows,
            sort=sort,
        )
        return await self.search_angles(request)

    async def get_angle_statistics(self) -> AngleStatisticsResponse | None:
        """Summarize angles by category and status, plus how many were created recently."""
        facet_search = AngleSearchRequest(
            query="*:*",
            rows=0,
            facet=True,
            facet_fields=list(STATISTICS_FACETS),
        )
        response = await self.search_angles(facet_search)
        if response is None or response.facet_counts is None:
            return None

        now = datetime.now(timezone.utc)
        facet_fields = response.facet_counts.facet_fields
        statistics = AngleStatisticsResponse(
            total_angles=response.header.total,
            categories=process_facet_list(facet_fields.get("category", [])),
            status_distribution=process_facet_list(facet_fields.get("status", [])),
            last_updated=now,
        )

        recent_filter = AngleFilterRequest(
            field="created_date",
            operator="range",
            from_=(now - RECENT_WINDOW).strftime(_TIMESTAMP_FORMAT),
            to=now.strftime(_TIMESTAMP_FORMAT),
        )
        recent = await self.filter_angles([recent_filter], start=0, rows=0)
        statistics.recent_angles = recent.header.total if recent is not None else 0
        return statistics

    async def get_angles(self, query: str | None = None) -> AngleSearchResponse | None:
        params = build_item_type_parameters(query, ANGLE_ITEM_FILTER)
        response = await self._get("/items", AngleSearchResponse, f"search angles for {query!r}", params=params)
        if response is not None:
            logger.info("Retrieved angles for query %r", query)
        return response

    async def get_dashboards(self, query: str | None = None) -> AngleSearchResponse | None:
        params = build_item_type_parameters(query, DASHBOARD_ITEM_FILTER)
        response = await self._get(
            "/items", AngleSearchResponse, f"search dashboards for {query!r}", params=params
        )
        if response is not None:
            logger.info("Retrieved dashboards for query %r", query)
        return response

    async def get_dashboard_by_uri(self, dashboard_uri: str) -> DashboardResponse | None:
        uri = normalize_uri(dashboard_uri)
        logger.info("Getting dashboard from %s", uri)
        dashboard = await self._get(uri, DashboardResponse, f"get dashboard {uri}")
        if dashboard is not None:
            logger.info("Retrieved dashboard with %d widgets", len(dashboard.widget_definitions))
        return dashboard

    async def execute_angle_display(
        self,
        model_id: int,
        angle_id: int,
        display_id: int,
    ) -> ExecuteAngleDisplayResponse | None:
        """Start a result for the given display via ``POST /results``."""
        angle_uri = f"/models/{model_id}/angles/{angle_id}"
        body = ExecuteAngleDisplayRequest(
            query_definition=[
                QueryDefinitionItem(queryblock_type="base_angle", base_angle=angle_uri),
                QueryDefinitionItem(
                    queryblock_type="base_display",
                    base_display=f"{angle_uri}/displays/{display_id}",
                ),
            ]
        )
        logger.info(
            "Executing angle display",
            extra={"model_id": model_id, "angle_id": angle_id, "display_id": display_id},
        )
        result = await self._post(
            "/results",
            body,
            ExecuteAngleDisplayResponse,
            f"execute display {display_id} of angle {angle_id} in model {model_id}",
            params={"redirect": "no"},
        )
        if result is not None:
            logger.info("Started result %s with status %s", result.id, result.status)
        return result

    async def get_angle_display_execution_status(
        self,
        result_uri: str,
    ) -> AngleDisplayExecutionStatus | None:
        uri = normalize_uri(result_uri)
        status = await self._get(uri, AngleDisplayExecutionStatus, f"get execution status from {uri}")
        if status is not None:
            logger.info(
                "Result %s status %s (execution time %dms)",
                status.id,
                status.status,
                status.execution_time,
            )
        return status

    async def get_data_rows(
        self,
        data_rows_uri: str,
        offset: int = 0,
        limit: int = 300,
        fields: list[str] | None = None,
    ) -> DataRowsResponse | None:
        uri = normalize_uri(data_rows_uri)
        params: dict[str, str | int] = {"offset": offset, "limit": limit}
        if fields:
            params["fields"] = ",".join(fields)
        rows = await self._get(uri, DataRowsResponse, f"get data rows from {uri}", params=params)
        if rows is not None:
            logger.info(
                "Retrieved data rows (total %d, offset %d, count %d)",
                rows.header.total,
                rows.header.offset,
                rows.header.count,
            )
        return rows

    async def get_data_fields(self, data_fields_uri: str) -> DataFieldsResponse | None:
        uri = normalize_uri(data_fields_uri)
        data_fields = await self._get(uri, DataFieldsResponse, f"get data fields from {uri}")
        if data_fields is not None:
            logger.info("Retrieved %d data fields", data_fields.header.total)
        return data_fields

    async def fetch_data_rows(
        self,
        data_rows_uri: str,
        fields: list[str] | None = None,
        max_rows: int | None = None,
    ) -> DataRowsResponse | None:
        """
        Collect rows page by page up to ``max_rows``.

        Pages are requested one after another with a fixed pause between them.
        A failed page ends the loop and whatever was collected so far is
        returned; only a failure on the first page yields ``None``.
        """
        cap = self._max_rows if max_rows is None else max(max_rows, 0)
        collected: list[DataRow] = []
        field_ids: list[str] = []
        total = 0
        offset = 0
        first_page = True

        while len(collected) < cap:
            if not first_page and self._page_delay > 0:
                await asyncio.sleep(self._page_delay)
            limit = min(self._page_size, cap - len(collected))
            page = await self.get_data_rows(data_rows_uri, offset=offset, limit=limit, fields=fields)
            if page is None:
                if first_page:
                    return None
                logger.warning(
                    "Stopping row collection after a failed page",
                    extra={"offset": offset, "collected": len(collected)},
                )
                break

            first_page = False
            total = page.header.total
            field_ids = field_ids or page.fields
            collected.extend(page.rows[:limit])
            offset += len(page.rows)
            if not page.rows or offset >= total:
                break

        return DataRowsResponse(
            header=DataRowsHeader(total=total, offset=0, limit=cap, count=len(collected)),
            fields=field_ids,
            rows=collected,
        )

    async def get_angle_result_data(
        self,
        result_uri: str,
        max_rows: int | None = None,
    ) -> AngleResultData | None:
        """Follow a result's ``data_fields`` and ``data_rows`` URIs and gather both."""
        status = await self.get_angle_display_execution_status(result_uri)
        if status is None:
            return None
        if not status.data_rows:
            logger.warning("Result %s has no data rows URI (status %s)", result_uri, status.status)
            return AngleResultData(result_uri=result_uri, status=status.status)

        data_fields = None
        if status.data_fields:
            data_fields = await self.get_data_fields(status.data_fields)

        rows = await self.fetch_data_rows(status.data_rows, max_rows=max_rows)
        if rows is None:
            return None

        return AngleResultData(
            result_uri=result_uri,
            status=status.status,
            fields=data_fields.fields if data_fields is not None else [],
            total_rows=rows.header.total,
            returned_rows=len(rows.rows),
            truncated=len(rows.rows) < rows.header.total,
            rows=rows.rows,
        )
