from appserver_mcp.models import AngleFilterRequest
from appserver_mcp.search import (
    AngleSearchRequest,
    build_filter_queries,
    build_item_type_parameters,
    build_query_parameters,
    process_facet_list,
)


def test_default_request_omits_server_defaults() -> None:
    assert build_query_parameters(AngleSearchRequest()) == [
        ("q", "*:*"),
        ("caching", "false"),
        ("viewmode", "basic"),
    ]


def test_full_request_parameters_in_order() -> None:
    request = AngleSearchRequest(
        query="sales orders",
        filter_queries=['status:"published"', "category:*fin*"],
        sort="name asc",
        start=20,
        rows=50,
        fields="id,name",
        facet=True,
        facet_fields=["category", "status"],
        highlight=True,
        highlight_fields="name",
    )
    assert build_query_parameters(request) == [
        ("q", "sales orders"),
        ("caching", "false"),
        ("viewmode", "basic"),
        ("start", "20"),
        ("rows", "50"),
        ("fl", "id,name"),
        ("sort", "name asc"),
        ("fq", 'status:"published"'),
        ("fq", "category:*fin*"),
        ("facet", "true"),
        ("facet.field", "category"),
        ("facet.field", "status"),
        ("highlight", "true"),
        ("hl.fl", "name"),
    ]


def test_rows_zero_is_sent() -> None:
    assert ("rows", "0") in build_query_parameters(AngleSearchRequest(rows=0))


def test_filter_query_operators() -> None:
    filters = [
        AngleFilterRequest(field="status", value="published"),
        AngleFilterRequest(field="name", value="sales", operator="contains"),
        AngleFilterRequest(field="name", value="sal", operator="StartsWith"),
        AngleFilterRequest(field="name", value="ders", operator="endswith"),
        AngleFilterRequest(field="created_date", operator="range", from_="2024-01-01T00:00:00Z"),
        AngleFilterRequest.model_validate({"field": "created_date", "operator": "range", "to": "NOW"}),
        AngleFilterRequest(field="status", value="draft", operator="not"),
        AngleFilterRequest(field="status", value="x", operator="unknown"),
    ]
    assert build_filter_queries(filters) == [
        'status:"published"',
        "name:*sales*",
        "name:sal*",
        "name:*ders",
        "created_date:[2024-01-01T00:00:00Z TO *]",
        "created_date:[* TO NOW]",
        '-status:"draft"',
        'status:"x"',
    ]


def test_filter_accepts_from_alias() -> None:
    item = AngleFilterRequest.model_validate({"field": "d", "operator": "range", "from": "A", "to": "B"})
    assert build_filter_queries([item]) == ["d:[A TO B]"]


def test_item_type_parameters() -> None:
    assert build_item_type_parameters(None, "facetcat_itemtype:(facet_angle)") == [
        ("fq", "facetcat_itemtype:(facet_angle)"),
        ("caching", "false"),
        ("viewmode", "basic"),
    ]
    assert build_item_type_parameters("sales", "f")[0] == ("q", "sales")


def test_process_facet_list_skips_bad_entries() -> None:
    assert process_facet_list(["finance", 12, "sales", "3", "hr", "n/a", "dangling"]) == {
        "finance": 12,
        "sales": 3,
    }
    assert process_facet_list([]) == {}
