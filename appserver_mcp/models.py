"""Pydantic view models mirroring the Appserver REST payloads.

Unknown upstream fields are kept (``extra="allow"``) so that re-serializing a
model for a tool caller never silently drops data the server returned.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AppserverModel(BaseModel):
    """Base class for all Appserver view models."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, protected_namespaces=())


class ListHeader(AppserverModel):
    """Paging header shared by the list endpoints."""

    total: int = 0
    limit: int = 0
    offset: int = 0


class WhoWhenView(AppserverModel):
    user: str = ""
    datetime: Optional[int] = None
    full_name: str = ""


# About / models


class ModelInfo(AppserverModel):
    model_id: str = ""
    version: str = ""
    status: str = ""
    modeldata_timestamp: int = 0
    model_definition_version: int = 0
    is_real_time: bool = False


class AboutOutputView(AppserverModel):
    app_server_version: str = ""
    models: list[ModelInfo] = Field(default_factory=list)


class ModelView(AppserverModel):
    """A model entry from ``/models``; related resources are given as URIs."""

    id: str = ""
    uri: str = ""
    short_name: str = ""
    long_name: str = ""
    abbreviation: str = ""
    environment: str = ""
    is_real_time: bool = False
    classes: Optional[str] = None
    fields: Optional[str] = None
    angles: Optional[str] = None
    agent: Optional[str] = None


class ModelsListResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    models: list[ModelView] = Field(default_factory=list)


class ModelClassView(AppserverModel):
    id: str = ""
    uri: str = ""
    short_name: str = ""
    long_name: str = ""
    main_businessprocess: Optional[str] = None
    helpid: Optional[str] = None


class ModelClassesResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    classes: list[ModelClassView] = Field(default_factory=list)


class ModelRecord(AppserverModel):
    """A row scraped from the legacy comprehensive models HTML page."""

    model_id: str
    description: str = ""
    status: str = ""
    version: str = ""
    modeldata_timestamp: str = ""
    is_real_time: bool = False


# Tasks


class ArgumentView(AppserverModel):
    name: str = ""
    value: Any = None


class DayView(AppserverModel):
    day: int = 0
    active: bool = False


class TriggerView(AppserverModel):
    trigger_type: str = ""
    arguments: Optional[list[ArgumentView]] = None
    event: Optional[str] = None
    days: Optional[list[DayView]] = None
    continuous: Optional[bool] = None
    frequency: Optional[str] = None
    start_time: Optional[int] = None


class ActionView(AppserverModel):
    action_type: str = ""
    arguments: list[ArgumentView] = Field(default_factory=list)


class TaskNotificationRecipientItemView(AppserverModel):
    email_address: str = ""
    result: bool = False
    success: bool = False
    failed: bool = False
    summary: bool = False


class TaskItemView(AppserverModel):
    id: str = ""
    name: str = ""
    enabled: bool = False
    status: str = ""
    triggers: list[TriggerView] = Field(default_factory=list)
    max_run_time: int = 0
    expected_run_time: int = 0
    uri: str = ""
    action_count: int = 0
    run_as_user: Optional[str] = None
    actions: list[ActionView] = Field(default_factory=list)
    created: WhoWhenView = Field(default_factory=WhoWhenView)
    changed: WhoWhenView = Field(default_factory=WhoWhenView)
    delete_after_completion: bool = False
    last_run_result: str = ""
    last_run_time: Optional[int] = None
    next_run_time: Optional[int] = None
    description: str = ""
    history: str = ""
    actions_uri: str = ""
    arguments: list[ArgumentView] = Field(default_factory=list)
    recipients: list[TaskNotificationRecipientItemView] = Field(default_factory=list)


class TasksListResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    tasks: list[TaskItemView] = Field(default_factory=list)


class TaskExecutionRequest(AppserverModel):
    start: bool = True
    reason: str = "Automated execution"


class TaskExecutionResponse(AppserverModel):
    task_id: str = ""
    status: str = ""
    message: str = ""


class TaskStatusResponse(AppserverModel):
    task_id: str = ""
    status: str = ""
    created_at: str = ""
    updated_at: str = ""
    progress: int = 0
    result: Any = None
    error: Optional[str] = None


# Users


class UserView(AppserverModel):
    id: str = ""
    username: str = ""
    full_name: str = ""
    email: str = ""
    enabled: bool = False
    is_admin: bool = False
    is_external: bool = False
    created: WhoWhenView = Field(default_factory=WhoWhenView)
    changed: WhoWhenView = Field(default_factory=WhoWhenView)
    last_login: Optional[int] = None
    uri: str = ""


class UsersListResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    users: list[UserView] = Field(default_factory=list)


# Business processes


class BusinessProcess(AppserverModel):
    id: str = ""
    uri: str = ""
    enabled: bool = False
    abbreviation: str = ""
    system: bool = False
    order: int = 0
    is_allowed: bool = False
    name: str = ""


class BusinessProcessSortOption(AppserverModel):
    id: str = ""


class BusinessProcessResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    business_processes: list[BusinessProcess] = Field(default_factory=list)
    sort_options: list[BusinessProcessSortOption] = Field(default_factory=list)


# Angles and search


class AngleFilterRequest(AppserverModel):
    field: str
    value: str = ""
    operator: str = "equals"
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class AngleDisplay(AppserverModel):
    id: str = ""
    uri: str = ""
    name: str = ""
    display_type: str = ""
    is_angle_default: bool = False
    used_in_task: bool = False


class AngleDocument(AppserverModel):
    id: str = ""
    uri: str = ""
    name: str = ""
    description: str = ""
    category: str = ""
    status: str = ""
    type: str = ""
    model: str = ""
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    displays: list[AngleDisplay] = Field(default_factory=list)


class FacetFilter(AppserverModel):
    id: str = ""
    name: str = ""
    description: str = ""
    count: Optional[int] = None


class FacetCategory(AppserverModel):
    id: str = ""
    name: str = ""
    description: str = ""
    type: str = ""
    filters: list[FacetFilter] = Field(default_factory=list)


class AngleSortOption(AppserverModel):
    id: str = ""
    name: str = ""
    is_selected: bool = False


class FacetCounts(AppserverModel):
    facet_queries: dict[str, int] = Field(default_factory=dict)
    facet_fields: dict[str, list[Any]] = Field(default_factory=dict)
    facet_ranges: dict[str, Any] = Field(default_factory=dict)
    facet_intervals: dict[str, Any] = Field(default_factory=dict)
    facet_heatmaps: dict[str, Any] = Field(default_factory=dict)


class AngleSearchResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    items: list[AngleDocument] = Field(default_factory=list)
    facets: list[FacetCategory] = Field(default_factory=list)
    sort_options: list[AngleSortOption] = Field(default_factory=list)
    advanced_filters: list[str] = Field(default_factory=list)
    facet_counts: Optional[FacetCounts] = None
    highlighting: Optional[dict[str, Any]] = None


class AngleStatisticsResponse(AppserverModel):
    total_angles: int = 0
    categories: dict[str, int] = Field(default_factory=dict)
    status_distribution: dict[str, int] = Field(default_factory=dict)
    recent_angles: int = 0
    last_updated: datetime


# Display execution and results


class QueryDefinitionItem(AppserverModel):
    queryblock_type: str
    base_angle: Optional[str] = None
    base_display: Optional[str] = None


class ExecuteAngleDisplayRequest(AppserverModel):
    query_definition: list[QueryDefinitionItem] = Field(default_factory=list)


class ExecutedInfo(AppserverModel):
    user: str = ""
    datetime: Optional[int] = None
    full_name: str = ""


class AngleAuthorizations(AppserverModel):
    change_field_collection: bool = False
    single_item_view: bool = False
    export: bool = False
    drilldown: bool = False
    sort: bool = False
    add_filter: bool = False
    add_followup: bool = False
    add_aggregation: bool = False


class ExecuteAngleDisplayResponse(AppserverModel):
    id: str = ""
    uri: str = ""
    status: str = ""
    progress: float = 0.0
    row_count: int = 0
    object_count: int = 0
    execution_time: int = 0
    successfully_completed: bool = False
    data_rows: Optional[str] = None
    data_fields: Optional[str] = None


class AngleDisplayExecutionStatus(ExecuteAngleDisplayResponse):
    is_aggregated: bool = False
    executed: Optional[ExecutedInfo] = None
    authorizations: Optional[AngleAuthorizations] = None
    query_definition: list[QueryDefinitionItem] = Field(default_factory=list)


class DataRowsHeader(AppserverModel):
    total: int = 0
    offset: int = 0
    limit: int = 0
    count: int = 0


class DataRow(AppserverModel):
    row_id: str = ""
    field_values: list[Any] = Field(default_factory=list)


class DataRowsResponse(AppserverModel):
    header: DataRowsHeader = Field(default_factory=DataRowsHeader)
    fields: list[str] = Field(default_factory=list)
    rows: list[DataRow] = Field(default_factory=list)


class DataField(AppserverModel):
    id: str = ""
    uri: str = ""
    short_name: str = ""
    long_name: str = ""
    fieldtype: str = ""
    source: Optional[str] = None
    domain: Optional[str] = None
    technical_info: Optional[str] = None


class DataFieldsResponse(AppserverModel):
    header: ListHeader = Field(default_factory=ListHeader)
    fields: list[DataField] = Field(default_factory=list)


class AngleResultData(AppserverModel):
    """Fields plus collected rows of an executed angle display."""

    result_uri: str
    status: str = ""
    fields: list[DataField] = Field(default_factory=list)
    total_rows: int = 0
    returned_rows: int = 0
    truncated: bool = False
    rows: list[DataRow] = Field(default_factory=list)


# Dashboards


class WidgetDefinition(AppserverModel):
    id: str = ""
    widget_type: str = ""
    widget_details: Optional[str] = None
    angle: Optional[str] = None
    display: Optional[str] = None
    name: str = ""


class DashboardResponse(AppserverModel):
    id: str = ""
    uri: str = ""
    name: str = ""
    description: str = ""
    model: str = ""
    is_published: bool = False
    layout: Optional[str] = None
    created: Optional[WhoWhenView] = None
    changed: Optional[WhoWhenView] = None
    widget_definitions: list[WidgetDefinition] = Field(default_factory=list)
    filters: list[Any] = Field(default_factory=list)
