"""
Services - Search Service

Direct CQL search built from structured filters, with cursor pagination.
"""

import logging
from typing import List, Optional

from confluence_mcp.client import ConfluenceClient
from confluence_mcp.config import get_settings
from confluence_mcp.errors import ConfluenceAPIError, enrich_bad_request
from confluence_mcp.schemas.search import (
    FilterSet,
    QueryDescriptor,
    SearchOutcome,
    SearchResponse,
)
from confluence_mcp.services.cql import build_cql_query
from confluence_mcp.services.pagination import PaginationType, extract_pagination_info

logger = logging.getLogger(__name__)

NO_CRITERIA_MESSAGE = "Please provide search criteria (CQL, title, space, etc.)."

CQL_SYNTAX_HINT = (
    "This may be due to invalid CQL syntax. Please check your CQL query, "
    'ensure terms in text searches are quoted (e.g., text ~ "your terms"), '
    "and refer to the Confluence CQL documentation."
)


class SearchService:
    """Searches Confluence content with a CQL query synthesized from filters."""

    def __init__(self, settings=None, client=None):
        self.settings = settings or get_settings()
        self.client = client or ConfluenceClient(self.settings)

    async def search(
        self,
        filters: FilterSet,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> SearchOutcome:
        """
        Search Confluence content.

        Args:
            filters: Title/space/label/type/text filters and optional raw CQL
            limit: Page size (default from settings)
            cursor: Continuation token from a previous page

        Returns:
            SearchOutcome with executed CQL, hits and pagination, or an
            advisory when no criteria were supplied

        Raises:
            ValueError: If limit is outside the allowed range
            ConfluenceAPIError: If the search request fails, or no space
                matches the given ``space_ids``
        """
        search_settings = self.settings.search
        page_size = limit if limit is not None else search_settings.default_page_size
        if page_size < 1 or page_size > search_settings.max_limit:
            raise ValueError(
                f"Invalid limit {page_size}: must be between 1 and {search_settings.max_limit}."
            )

        space_keys = None
        if filters.space_ids:
            space_keys = await self._space_keys_for_ids(filters.space_ids)

        cql = build_cql_query(filters, space_keys=space_keys)
        if not cql.strip():
            logger.warning("No CQL criteria provided for search")
            return SearchOutcome(advisory=NO_CRITERIA_MESSAGE)

        logger.debug(f"Executing generated CQL: {cql}")

        descriptor = QueryDescriptor(
            cql=cql,
            limit=page_size,
            cursor=cursor,
            excerpt="highlight",
            include_archived_spaces=False,
        )

        try:
            raw = await self.client.search(descriptor)
        except ConfluenceAPIError as e:
            enrich_bad_request(e, "Search", CQL_SYNTAX_HINT)
            raise

        response = SearchResponse.model_validate(raw)
        pagination = extract_pagination_info(raw, PaginationType.CURSOR)

        logger.debug(
            f"Retrieved {len(response.results)} search results. "
            f"Has more: {'yes' if pagination.has_more else 'no'}"
        )

        return SearchOutcome(
            cql=cql,
            results=response.results,
            pagination=pagination,
        )

    async def _space_keys_for_ids(self, space_ids: List[str]) -> List[str]:
        """Resolve space ids to the keys CQL filters on."""
        batch = self.settings.search.space_lookup_batch
        keys: List[str] = []

        for i in range(0, len(space_ids), batch):
            chunk = space_ids[i:i + batch]
            response = await self.client.list_spaces(ids=chunk, limit=batch)
            keys.extend(
                space["key"] for space in response.get("results", []) if space.get("key")
            )

        if not keys:
            raise ConfluenceAPIError(
                f"No spaces found for IDs: {', '.join(space_ids)}",
                status_code=404,
            )
        logger.debug(f"Resolved space IDs {space_ids} to keys {keys}")
        return keys
