"""
Tests for ConfluenceClient against a mocked HTTP transport
"""

import httpx
import pytest

from confluence_mcp.client import COMMENT_EXPAND, ConfluenceClient
from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.search import QueryDescriptor


def recording_transport(requests, status=200, payload=None):
    """MockTransport that records requests and answers with a fixed response."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status, json=payload if payload is not None else {"results": []})
    return httpx.MockTransport(handler)


class TestRequests:
    """Tests for URLs, params and auth sent to Confluence."""

    @pytest.mark.asyncio
    async def test_search_params(self, settings):
        requests = []
        client = ConfluenceClient(settings, transport=recording_transport(requests))

        await client.search(
            QueryDescriptor(cql='space = "DEV"', limit=10, cursor="abc", excerpt="highlight")
        )

        request = requests[0]
        assert request.url.path == "/wiki/rest/api/search"
        assert request.url.params["cql"] == 'space = "DEV"'
        assert request.url.params["limit"] == "10"
        assert request.url.params["cursor"] == "abc"
        assert request.url.params["excerpt"] == "highlight"
        assert request.url.params["includeArchivedSpaces"] == "false"
        assert "start" not in request.url.params
        assert request.headers["authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_no_auth_without_credentials(self, settings):
        settings.confluence.api_token = None
        requests = []
        client = ConfluenceClient(settings, transport=recording_transport(requests))

        await client.list_pages({"limit": 5})

        assert "authorization" not in requests[0].headers
        assert requests[0].url.path == "/wiki/api/v2/pages"

    @pytest.mark.asyncio
    async def test_list_spaces_joins_ids(self, settings):
        requests = []
        client = ConfluenceClient(settings, transport=recording_transport(requests))

        await client.list_spaces(ids=["1", "2"], limit=100)

        assert requests[0].url.params["ids"] == "1,2"
        assert requests[0].url.params["limit"] == "100"
        assert "keys" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_page_comments(self, settings):
        requests = []
        client = ConfluenceClient(settings, transport=recording_transport(requests))

        await client.list_page_comments("98765", start=25, limit=25)

        request = requests[0]
        assert request.url.path == "/wiki/rest/api/content/98765/child/comment"
        assert request.url.params["start"] == "25"
        assert request.url.params["expand"] == COMMENT_EXPAND

    @pytest.mark.asyncio
    async def test_rejects_unsafe_page_id(self, settings):
        requests = []
        client = ConfluenceClient(settings, transport=recording_transport(requests))

        with pytest.raises(ValueError):
            await client.list_page_comments("123/../admin")
        assert requests == []


class TestErrors:
    """Tests for mapping HTTP failures to ConfluenceAPIError."""

    @pytest.mark.asyncio
    async def test_bad_request_keeps_status(self, settings):
        transport = recording_transport(
            [], status=400, payload={"statusCode": 400, "message": "Could not parse cql"}
        )
        client = ConfluenceClient(settings, transport=transport)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await client.search(QueryDescriptor(cql="type ="))

        assert exc_info.value.status_code == 400
        assert exc_info.value.is_bad_request
        assert "Could not parse cql" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_v2_error_title(self, settings):
        transport = recording_transport(
            [], status=404, payload={"errors": [{"status": 404, "title": "Not Found"}]}
        )
        client = ConfluenceClient(settings, transport=transport)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await client.list_pages({})

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_failure_has_no_status(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = ConfluenceClient(settings, transport=httpx.MockTransport(handler))

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await client.list_spaces(keys=["DEV"])

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.original, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_non_json_body(self, settings):
        """Test an HTML login page with status 200 becomes a ConfluenceAPIError."""
        def handler(request):
            return httpx.Response(200, text="<html>login</html>")

        client = ConfluenceClient(settings, transport=httpx.MockTransport(handler))

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await client.search(QueryDescriptor(cql='title ~ "x*"'))

        assert exc_info.value.status_code == 200
        assert "non-JSON" in str(exc_info.value)
        assert isinstance(exc_info.value.original, ValueError)
