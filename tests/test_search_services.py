"""
Tests for SearchService and UniversalSearchService
"""

import asyncio

import pytest

from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.search import SEARCH_CATEGORIES, FilterSet
from confluence_mcp.services.search_service import NO_CRITERIA_MESSAGE, SearchService
from confluence_mcp.services.universal_search_service import (
    MISSING_QUERY_MESSAGE,
    NO_TYPES_MESSAGE,
    UniversalSearchService,
)
from tests.conftest import search_hit


class TestSearchService:
    """Tests for direct CQL search."""

    @pytest.mark.asyncio
    async def test_search_executes_generated_cql(self, settings, client):
        """Test the descriptor sent to the executor."""
        client.search.return_value = {
            "results": [search_hit("101", "Deploy guide")],
            "_links": {"next": "/rest/api/search?cql=x&cursor=NEXT1"},
        }
        service = SearchService(settings, client=client)

        outcome = await service.search(
            FilterSet(title="Deploy", space_key="DEV"), limit=10, cursor="PREV"
        )

        descriptor = client.search.await_args.args[0]
        assert descriptor.cql == 'title ~ "Deploy" AND space = "DEV"'
        assert descriptor.limit == 10
        assert descriptor.cursor == "PREV"
        assert descriptor.excerpt == "highlight"
        assert descriptor.include_archived_spaces is False

        assert outcome.cql == descriptor.cql
        assert outcome.results[0].content.id == "101"
        assert outcome.pagination.has_more is True
        assert outcome.pagination.next_cursor == "NEXT1"

    @pytest.mark.asyncio
    async def test_no_criteria_returns_advisory(self, settings, client):
        """Test that an empty filter set is never sent."""
        service = SearchService(settings, client=client)

        outcome = await service.search(FilterSet())

        assert outcome.advisory == NO_CRITERIA_MESSAGE
        client.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_limit_from_settings(self, settings, client):
        service = SearchService(settings, client=client)

        await service.search(FilterSet(query="x"))

        assert client.search.await_args.args[0].limit == settings.search.default_page_size

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1, 101])
    async def test_invalid_limit_rejected(self, settings, client, limit):
        service = SearchService(settings, client=client)

        with pytest.raises(ValueError):
            await service.search(FilterSet(query="x"), limit=limit)
        client.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_request_gets_cql_hint(self, settings, client):
        client.search.side_effect = ConfluenceAPIError("Could not parse cql", status_code=400)
        service = SearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search(FilterSet(cql="text ~ unquoted terms"))

        message = str(exc_info.value)
        assert message.startswith("Search failed (Status 400 - Bad Request): Could not parse cql")
        assert "invalid CQL syntax" in message

    @pytest.mark.asyncio
    async def test_space_ids_resolved_to_keys(self, settings, client):
        client.list_spaces.return_value = {
            "results": [{"id": "1", "key": "DEV"}, {"id": "2", "key": "OPS"}],
        }
        service = SearchService(settings, client=client)

        outcome = await service.search(FilterSet(query="deploy", space_ids=["1", "2"]))

        client.list_spaces.assert_awaited_once_with(ids=["1", "2"], limit=100)
        assert outcome.cql == '(space = "DEV" OR space = "OPS") AND text ~ "deploy"'

    @pytest.mark.asyncio
    async def test_space_ids_alone_are_criteria(self, settings, client):
        client.list_spaces.return_value = {"results": [{"id": "1", "key": "DEV"}]}
        service = SearchService(settings, client=client)

        outcome = await service.search(FilterSet(space_ids=["1"]))

        assert outcome.advisory is None
        assert client.search.await_args.args[0].cql == '(space = "DEV")'

    @pytest.mark.asyncio
    async def test_unknown_space_ids(self, settings, client):
        service = SearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search(FilterSet(query="x", space_ids=["999"]))

        assert exc_info.value.status_code == 404
        client.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_errors_propagate_unchanged(self, settings, client):
        client.search.side_effect = ConfluenceAPIError("Unauthorized", status_code=401)
        service = SearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search(FilterSet(query="x"))

        assert str(exc_info.value) == "Unauthorized"


def hits_by_type(per_type):
    """side_effect returning canned hits based on the CQL type clause."""
    async def respond(descriptor):
        for cql_type, hits in per_type.items():
            if descriptor.cql.startswith(f"type = {cql_type} "):
                return {"results": hits, "_links": {}}
        return {"results": [], "_links": {}}
    return respond


class TestUniversalSearchService:
    """Tests for the per-category fan-out."""

    @pytest.mark.asyncio
    async def test_one_call_per_category(self, settings, client):
        """Test every category is searched with its own CQL."""
        service = UniversalSearchService(settings, client=client)

        await service.search("incident")

        cqls = sorted(call.args[0].cql for call in client.search.await_args_list)
        assert cqls == sorted([
            'type = space AND text ~ "incident"',
            'type = page AND text ~ "incident"',
            'type = blogpost AND text ~ "incident"',
            'type = attachment AND text ~ "incident"',
            'type = comment AND text ~ "incident"',
        ])
        for call in client.search.await_args_list:
            descriptor = call.args[0]
            assert descriptor.excerpt == "highlight"
            assert descriptor.include_archived_spaces is False
            assert descriptor.limit == 5

    @pytest.mark.asyncio
    async def test_only_pages_enabled(self, settings, client):
        """Test disabled categories are present but empty."""
        client.search.side_effect = hits_by_type({
            "page": [search_hit(str(i), f"Page {i}") for i in range(3)],
        })
        service = UniversalSearchService(settings, client=client)

        result = await service.search(
            "design",
            include_spaces=False,
            include_blog_posts=False,
            include_attachments=False,
            include_comments=False,
            limit_per_type=3,
        )

        assert client.search.await_count == 1
        assert result.included_types == ["pages"]
        assert set(result.results) == set(SEARCH_CATEGORIES)
        assert len(result.results["pages"]) <= 3
        for category in ("spaces", "blog_posts", "attachments", "comments"):
            assert result.results[category] == []

    @pytest.mark.asyncio
    async def test_no_categories_enabled(self, settings, client):
        service = UniversalSearchService(settings, client=client)

        result = await service.search(
            "design",
            include_spaces=False,
            include_pages=False,
            include_blog_posts=False,
            include_attachments=False,
            include_comments=False,
        )

        assert result.advisory == NO_TYPES_MESSAGE
        assert client.search.await_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_blank_query(self, settings, client, query):
        service = UniversalSearchService(settings, client=client)

        result = await service.search(query)

        assert result.advisory == MISSING_QUERY_MESSAGE
        assert client.search.await_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested,expected", [(None, 5), (0, 1), (-3, 1), (7, 7), (80, 25)])
    async def test_limit_clamped(self, settings, client, requested, expected):
        service = UniversalSearchService(settings, client=client)

        result = await service.search("x", include_spaces=False, limit_per_type=requested)

        assert result.limit_per_type == expected
        assert all(c.args[0].limit == expected for c in client.search.await_args_list)

    @pytest.mark.asyncio
    async def test_space_and_label_filters(self, settings, client):
        service = UniversalSearchService(settings, client=client)

        await service.search("x", space_key=" DEV ", labels=["ops", "  ", " q3 "])

        cqls = {call.args[0].cql.split(" AND ")[0]: call.args[0].cql
                for call in client.search.await_args_list}
        assert cqls["type = space"] == 'type = space AND text ~ "x"'
        assert cqls["type = page"] == (
            'type = page AND text ~ "x" AND space = "DEV" AND label = "ops" AND label = "q3"'
        )
        assert cqls["type = attachment"] == 'type = attachment AND text ~ "x" AND space = "DEV"'

    @pytest.mark.asyncio
    async def test_results_keyed_regardless_of_completion_order(self, settings, client):
        """Test slow categories still land under their own key."""
        async def respond(descriptor):
            if descriptor.cql.startswith("type = space "):
                await asyncio.sleep(0.01)
                return {"results": [search_hit("s1", "Space", content_type="space")]}
            if descriptor.cql.startswith("type = page "):
                return {"results": [search_hit("p1", "Page")]}
            return {"results": []}

        client.search.side_effect = respond
        service = UniversalSearchService(settings, client=client)

        result = await service.search("x")

        assert [h.content.id for h in result.results["spaces"]] == ["s1"]
        assert [h.content.id for h in result.results["pages"]] == ["p1"]

    @pytest.mark.asyncio
    async def test_any_failure_fails_whole_search(self, settings, client):
        async def respond(descriptor):
            if descriptor.cql.startswith("type = comment "):
                raise ConfluenceAPIError("boom", status_code=503)
            return {"results": [search_hit("1", "ok")]}

        client.search.side_effect = respond
        service = UniversalSearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search("x")

        assert str(exc_info.value) == "boom"

    @pytest.mark.asyncio
    async def test_bad_request_gets_filter_hint(self, settings, client):
        client.search.side_effect = ConfluenceAPIError("bad cql", status_code=400)
        service = UniversalSearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search("x", include_spaces=False, include_comments=False)

        message = str(exc_info.value)
        assert message.startswith("Universal search failed (Status 400 - Bad Request): bad cql")
        assert "invalid CQL generated from the provided filters" in message

    @pytest.mark.asyncio
    async def test_malformed_payload_becomes_api_error(self, settings, client):
        client.search.return_value = {"results": [{"content": {"type": "page"}, "space": "oops"}]}
        service = UniversalSearchService(settings, client=client)

        with pytest.raises(ConfluenceAPIError) as exc_info:
            await service.search("x", include_spaces=False)

        assert exc_info.value.status_code == 500
