"""Tests for the upstream archive client."""

import httpx
import pytest

from archive_search.upstream.archive_client import (
    SEARCH_FIELDS,
    ArchiveUpstreamError,
    parse_search_payload,
)
from tests.conftest import search_payload


@pytest.mark.asyncio
async def test_advanced_search_request_parameters(make_client):
    """Search requests carry the query, field list and window."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json=search_payload([{"identifier": "a"}], num_found=42))

    client = make_client(handler)
    page = await client.advanced_search("title:(rocky)", rows=50, start=20)
    await client.aclose()

    url = seen["url"]
    assert url.host == "archive.test"
    assert url.path == "/advancedsearch.php"
    assert url.params["q"] == "title:(rocky)"
    assert url.params.get_list("fl[]") == list(SEARCH_FIELDS)
    assert url.params["rows"] == "50"
    assert url.params["start"] == "20"
    assert url.params["output"] == "json"

    assert page.docs == [{"identifier": "a"}]
    assert page.total == 42


@pytest.mark.asyncio
async def test_advanced_search_total_falls_back_to_doc_count(make_client):
    """A missing numFound is replaced by the number of returned docs."""
    client = make_client(
        lambda request: httpx.Response(200, json=search_payload([{"identifier": "a"}, {"identifier": "b"}]))
    )
    page = await client.advanced_search("q", rows=10)

    assert page.total == 2


@pytest.mark.asyncio
async def test_advanced_search_http_error_raises(make_client):
    """Non-2xx responses raise ArchiveUpstreamError."""
    client = make_client(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(ArchiveUpstreamError):
        await client.advanced_search("q", rows=10)


@pytest.mark.asyncio
async def test_advanced_search_invalid_json_raises(make_client):
    """An unparseable body raises ArchiveUpstreamError."""
    client = make_client(lambda request: httpx.Response(200, text="<html>nope</html>"))

    with pytest.raises(ArchiveUpstreamError):
        await client.advanced_search("q", rows=10)


@pytest.mark.asyncio
async def test_advanced_search_connection_error_raises(make_client):
    """Transport failures raise ArchiveUpstreamError."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(ArchiveUpstreamError):
        await client.advanced_search("q", rows=10)


def test_parse_search_payload_tolerates_malformed_bodies():
    """Malformed docs or totals degrade to empty values."""
    page = parse_search_payload({"response": {"docs": "oops", "numFound": 7}})
    assert page.docs == []
    assert page.total == 7

    page = parse_search_payload({"response": {"docs": [{"identifier": "a"}], "numFound": "many"}})
    assert page.total == 1

    page = parse_search_payload({"response": {"docs": [], "numFound": True}})
    assert page.total == 0

    page = parse_search_payload([])
    assert page.docs == []
    assert page.total == 0


def test_parse_search_payload_drops_non_object_docs():
    """Null and scalar entries in docs are skipped."""
    page = parse_search_payload(
        {"response": {"docs": [None, {"identifier": "a"}, "b", 3], "numFound": 4}}
    )
    assert page.docs == [{"identifier": "a"}]
    assert page.total == 4

    page = parse_search_payload({"response": {"docs": [None, {"identifier": "a"}]}})
    assert page.total == 1


@pytest.mark.asyncio
async def test_get_item_metadata(make_client):
    """Metadata is fetched from the per-item endpoint."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json={"metadata": {"identifier": "rocky-ii"}})

    client = make_client(handler)
    item = await client.get_item_metadata("rocky-ii")

    assert seen["path"] == "/metadata/rocky-ii"
    assert item == {"metadata": {"identifier": "rocky-ii"}}


@pytest.mark.asyncio
async def test_get_item_metadata_unknown_identifier(make_client):
    """An empty object or a non-2xx status means the item is unavailable."""
    client = make_client(lambda request: httpx.Response(200, json={}))
    assert await client.get_item_metadata("missing") is None

    client = make_client(lambda request: httpx.Response(404, json={"error": "not found"}))
    assert await client.get_item_metadata("missing") is None


@pytest.mark.asyncio
async def test_get_item_metadata_connection_error_raises(make_client):
    """Transport failures raise rather than masquerading as not found."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(ArchiveUpstreamError):
        await client.get_item_metadata("rocky-ii")
