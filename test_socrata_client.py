#!/usr/bin/env python3
"""
Tests for the Socrata HTTP client, run against httpx.MockTransport.
"""

import asyncio
import json

import httpx
import pytest

from datasf_mcp import tools
from datasf_mcp.correction import CorrectionOrchestrator, ErrorKind, QueryOutcome, SchemaCache, classify_error
from datasf_mcp.exceptions import SocrataAPIError
from datasf_mcp.socrata import (
    fetch_schema,
    get_socrata_headers,
    list_datasets,
    query_resource,
    search_datasets,
)
from datasf_mcp.socrata.client import _sanitize_headers_for_logging

VIEW_BODY = {
    "name": "Police Department Incident Reports",
    "rowsUpdatedAt": 1700000000,
    "columns": [
        {"name": "Incident ID", "fieldName": "incident_id", "dataTypeName": "number"},
        {"name": "Incident Category", "fieldName": "category"},
    ],
}


def transport_for(handler, seen=None):
    def wrapped(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return handler(request)
    return httpx.MockTransport(wrapped)


@pytest.fixture(autouse=True)
def no_app_token(monkeypatch):
    monkeypatch.delenv("SOCRATA_APP_TOKEN", raising=False)
    monkeypatch.delenv("DATASF_DOMAIN", raising=False)
    monkeypatch.delenv("SOCRATA_CATALOG_URL", raising=False)


def test_fetch_schema_maps_columns():
    seen = []
    transport = transport_for(lambda request: httpx.Response(200, json=VIEW_BODY), seen)

    schema = asyncio.run(fetch_schema("wg3w-h783", transport=transport))

    assert str(seen[0].url) == "https://data.sfgov.org/api/views/wg3w-h783.json"
    assert schema.dataset_name == "Police Department Incident Reports"
    assert schema.field_names == ["incident_id", "category"]
    assert schema.columns[0].data_type == "number"
    assert schema.columns[1].data_type == "text"
    assert schema.row_count == 1700000000


def test_fetch_schema_without_row_info_reports_zero_rows():
    body = dict(VIEW_BODY, rowsUpdatedAt=None)
    transport = transport_for(lambda request: httpx.Response(200, json=body))

    assert asyncio.run(fetch_schema("wg3w-h783", transport=transport)).row_count == 0


def test_app_token_header_is_sent_when_configured(monkeypatch):
    monkeypatch.setenv("SOCRATA_APP_TOKEN", "secret-token")
    seen = []
    transport = transport_for(lambda request: httpx.Response(200, json=[]), seen)

    asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport))

    assert seen[0].headers["X-App-Token"] == "secret-token"
    assert seen[0].headers["Accept"] == "application/json"


def test_headers_without_token():
    assert "X-App-Token" not in get_socrata_headers()


def test_app_token_is_redacted_for_logging():
    sanitized = _sanitize_headers_for_logging({"X-App-Token": "secret-token", "Accept": "application/json"})

    assert sanitized == {"X-App-Token": "[REDACTED]", "Accept": "application/json"}


def test_query_resource_sends_soql_as_query_param():
    seen = []
    rows = [{"incident_id": "1"}, {"incident_id": "2"}]
    transport = transport_for(lambda request: httpx.Response(200, json=rows), seen)

    result = asyncio.run(query_resource("wg3w-h783", "SELECT incident_id LIMIT 2", transport=transport))

    assert result == rows
    assert seen[0].url.path == "/resource/wg3w-h783.json"
    assert seen[0].url.params["$query"] == "SELECT incident_id LIMIT 2"


def test_query_resource_rejects_non_list_body():
    transport = transport_for(lambda request: httpx.Response(200, json={"unexpected": True}))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport))

    assert classify_error(excinfo.value).kind is ErrorKind.API_ERROR


def test_error_status_carries_remote_message_and_code():
    body = {"code": "query.soql.no-such-column", "error": True, "message": "No such column: catagory"}
    transport = transport_for(lambda request: httpx.Response(400, json=body))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT catagory", transport=transport))

    error = classify_error(excinfo.value)
    assert excinfo.value.status_code == 400
    assert error.kind is ErrorKind.API_ERROR
    assert error.message == "No such column: catagory"
    assert error.details == "query.soql.no-such-column"


@pytest.mark.parametrize("status, kind", [(404, ErrorKind.NOT_FOUND), (429, ErrorKind.RATE_LIMIT)])
def test_status_codes_are_classified(status, kind):
    transport = transport_for(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(fetch_schema("abcd-1234", transport=transport))

    assert classify_error(excinfo.value).kind is kind


def test_invalid_json_is_an_api_error():
    transport = transport_for(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport))

    assert excinfo.value.message.startswith("Invalid JSON response")


def test_transport_timeout_propagates():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(httpx.TimeoutException) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport_for(handler)))

    assert classify_error(excinfo.value, timeout=30.0).kind is ErrorKind.TIMEOUT


def test_connection_failure_is_an_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport_for(handler)))

    error = classify_error(excinfo.value)
    assert excinfo.value.status_code is None
    assert error.kind is ErrorKind.API_ERROR
    assert "connection refused" in error.message


def test_search_datasets_queries_catalog():
    seen = []
    body = {
        "results": [
            {
                "resource": {"id": "wg3w-h783", "name": "Police Incidents", "description": "Reports"},
                "classification": {"domain_category": "Public Safety"},
            },
            {"resource": {"id": "abcd-1234", "name": "Trees"}},
        ]
    }
    transport = transport_for(lambda request: httpx.Response(200, json=body), seen)

    results = asyncio.run(search_datasets("police", limit=2, transport=transport))

    params = seen[0].url.params
    assert str(seen[0].url).startswith("https://api.us.socrata.com/api/catalog/v1")
    assert params["q"] == "police"
    assert params["domains"] == "data.sfgov.org"
    assert params["order"] == "relevance"
    assert params["limit"] == "2"
    assert [r.to_dict() for r in results] == [
        {"id": "wg3w-h783", "name": "Police Incidents", "description": "Reports", "category": "Public Safety"},
        {"id": "abcd-1234", "name": "Trees", "description": "", "category": None},
    ]


def test_list_datasets_filters_by_category():
    seen = []
    transport = transport_for(lambda request: httpx.Response(200, json={"results": []}), seen)

    results = asyncio.run(list_datasets("Housing", limit=3, transport=transport))

    assert results == []
    assert seen[0].url.params["categories"] == "Housing"
    assert seen[0].url.params["order"] == "updatedAt"


def test_list_datasets_without_category_omits_filter():
    seen = []
    transport = transport_for(lambda request: httpx.Response(200, json={"results": []}), seen)

    asyncio.run(list_datasets(transport=transport))

    assert "categories" not in seen[0].url.params


def test_error_messages_never_include_the_app_token(monkeypatch):
    monkeypatch.setenv("SOCRATA_APP_TOKEN", "secret-token")
    transport = transport_for(lambda request: httpx.Response(500, json={"message": "Internal error"}))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("wg3w-h783", "SELECT *", transport=transport))

    assert "secret-token" not in json.dumps(classify_error(excinfo.value).to_dict())


@pytest.mark.parametrize("columns", [["not-a-dict"], "incident_id", {"fieldName": "incident_id"}])
def test_malformed_view_columns_are_an_api_error(columns):
    body = {"name": "x", "columns": columns}
    transport = transport_for(lambda request: httpx.Response(200, json=body))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(fetch_schema("abcd-1234", transport=transport))

    assert excinfo.value.message.startswith("Unexpected views response format")
    assert classify_error(excinfo.value).kind is ErrorKind.API_ERROR


def test_null_view_name_becomes_empty_string():
    body = {"name": None, "columns": [{"name": None, "fieldName": "incident_id"}]}
    transport = transport_for(lambda request: httpx.Response(200, json=body))

    schema = asyncio.run(fetch_schema("abcd-1234", transport=transport))

    assert schema.dataset_name == ""
    assert schema.columns[0].name == ""
    assert schema.field_names == ["incident_id"]


@pytest.mark.parametrize("body", [
    {"results": ["not-a-dict"]},
    {"results": {"resource": {}}},
    {"results": [{"resource": "wg3w-h783"}]},
])
def test_malformed_catalog_results_are_an_api_error(body):
    transport = transport_for(lambda request: httpx.Response(200, json=body))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(search_datasets("police", transport=transport))

    assert excinfo.value.message.startswith("Unexpected catalog response format")


def test_body_that_is_not_utf8_is_an_api_error():
    transport = transport_for(lambda request: httpx.Response(200, content=b'[{"a": "\xff\xfe"}]'))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(query_resource("abcd-1234", "SELECT a", transport=transport))

    assert excinfo.value.message.startswith("Invalid JSON response")
    assert classify_error(excinfo.value).kind is ErrorKind.API_ERROR


def test_error_status_with_undecodable_body_keeps_status():
    transport = transport_for(lambda request: httpx.Response(404, content=b'{"message": "\xff"}'))

    with pytest.raises(SocrataAPIError) as excinfo:
        asyncio.run(fetch_schema("abcd-1234", transport=transport))

    assert excinfo.value.status_code == 404
    assert classify_error(excinfo.value).kind is ErrorKind.NOT_FOUND


def socrata_orchestrator(routes):
    """Orchestrator wired to the real Socrata operations over a path-routed mock transport."""
    seen = []
    transport = transport_for(lambda request: routes[request.url.path](request), seen)

    async def _fetch_schema(dataset_id):
        return await fetch_schema(dataset_id, transport=transport)

    async def _execute_query(dataset_id, soql):
        return await query_resource(dataset_id, soql, transport=transport)

    orchestrator = CorrectionOrchestrator(SchemaCache(), _fetch_schema, _execute_query)
    return orchestrator, seen


def test_malformed_schema_response_does_not_block_the_query():
    rows = [{"a": "1"}]
    orchestrator, seen = socrata_orchestrator({
        "/api/views/abcd-1234.json": lambda request: httpx.Response(200, json={"name": "x", "columns": ["not-a-dict"]}),
        "/resource/abcd-1234.json": lambda request: httpx.Response(200, json=rows),
    })

    outcome = asyncio.run(orchestrator.run_query("abcd-1234", "SELECT a"))

    assert isinstance(outcome, QueryOutcome)
    assert outcome.records == rows
    assert outcome.corrections == []
    assert [request.url.path for request in seen] == ["/api/views/abcd-1234.json", "/resource/abcd-1234.json"]
    assert seen[1].url.params["$query"] == "SELECT a"


def test_undecodable_query_response_reaches_the_tool_as_api_error():
    orchestrator, _ = socrata_orchestrator({
        "/resource/abcd-1234.json": lambda request: httpx.Response(200, content=b'[{"a": "\xff\xfe"}]'),
    })

    payload = asyncio.run(tools.query_datasf(orchestrator, "abcd-1234", "SELECT a", auto_correct=False))

    assert payload["error_type"] == "api_error"
    assert payload["error"].startswith("Invalid JSON response")
