"""Query-string helpers for the Appserver ``/items`` search endpoint."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from appserver_mcp.models import AngleFilterRequest

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 10
ANGLE_ITEM_FILTER = "facetcat_itemtype:(facet_angle)"
DASHBOARD_ITEM_FILTER = "facetcat_itemtype:(facet_dashboard)"


@dataclass(slots=True)
class AngleSearchRequest:
    """Search parameters understood by ``/items``."""

    query: str = "*:*"
    filter_queries: list[str] = field(default_factory=list)
    sort: str = ""
    start: int = 0
    rows: int = DEFAULT_ROWS
    fields: str = "*"
    facet: bool = False
    facet_fields: list[str] = field(default_factory=list)
    highlight: bool = False
    highlight_fields: str = ""


def build_query_parameters(request: AngleSearchRequest) -> list[tuple[str, str]]:
    """Translate a search request into ordered query parameters.

    Defaults are left out so the server applies its own (``start`` only when
    positive, ``rows`` only when it differs from 10, ``fl`` only when it is not
    ``*``).
    """
    params: list[tuple[str, str]] = [
        ("q", request.query),
        ("caching", "false"),
        ("viewmode", "basic"),
    ]

    if request.start > 0:
        params.append(("start", str(request.start)))
    if request.rows != DEFAULT_ROWS:
        params.append(("rows", str(request.rows)))
    if request.fields and request.fields != "*":
        params.append(("fl", request.fields))
    if request.sort:
        params.append(("sort", request.sort))

    params.extend(("fq", fq) for fq in request.filter_queries)

    if request.facet:
        params.append(("facet", "true"))
        params.extend(("facet.field", name) for name in request.facet_fields)

    if request.highlight:
        params.append(("highlight", "true"))
        if request.highlight_fields:
            params.append(("hl.fl", request.highlight_fields))

    return params


def build_item_type_parameters(query: str | None, item_filter: str) -> list[tuple[str, str]]:
    """Parameters for listing items of one type, optionally narrowed by a free-text query."""
    params: list[tuple[str, str]] = []
    if query:
        params.append(("q", query))
    params.extend(
        [
            ("fq", item_filter),
            ("caching", "false"),
            ("viewmode", "basic"),
        ]
    )
    return params


def build_filter_query(item: AngleFilterRequest) -> str:
    operator = item.operator.lower()
    if operator == "contains":
        return f"{item.field}:*{item.value}*"
    if operator == "startswith":
        return f"{item.field}:{item.value}*"
    if operator == "endswith":
        return f"{item.field}:*{item.value}"
    if operator == "range":
        return f"{item.field}:[{item.from_ or '*'} TO {item.to or '*'}]"
    if operator == "not":
        return f'-{item.field}:"{item.value}"'
    # "equals" and anything unrecognised
    return f'{item.field}:"{item.value}"'


def build_filter_queries(filters: Iterable[AngleFilterRequest]) -> list[str]:
    return [build_filter_query(item) for item in filters]


def process_facet_list(values: list[Any]) -> dict[str, int]:
    """Fold a flat ``[key, count, key, count, ...]`` facet list into a dict."""
    result: dict[str, int] = {}
    for index in range(0, len(values) - 1, 2):
        key = "" if values[index] is None else str(values[index])
        try:
            result[key] = int(str(values[index + 1]))
        except ValueError:
            logger.debug("Skipping facet entry with non-numeric count", extra={"facet_key": key})
    return result
