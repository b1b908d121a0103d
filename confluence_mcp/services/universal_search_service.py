"""
Services - Universal Search Service

Fans one text query out into a CQL search per content type, run concurrently,
and collects the hits per category.
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from confluence_mcp.client import ConfluenceClient
from confluence_mcp.config import get_settings
from confluence_mcp.errors import ConfluenceAPIError, enrich_bad_request
from confluence_mcp.schemas.search import (
    SEARCH_CATEGORIES,
    QueryDescriptor,
    SearchResponse,
    SearchResultItem,
    UniversalSearchResult,
)
from confluence_mcp.services.cql import build_category_cql

logger = logging.getLogger(__name__)

MISSING_QUERY_MESSAGE = 'Please provide a search query (for example: `--query "design"`).'

NO_TYPES_MESSAGE = (
    "No content types selected. Enable at least one type "
    "(pages, spaces, blog posts, attachments, or comments)."
)

FILTER_HINT = (
    "This may indicate invalid CQL generated from the provided filters. "
    "Double-check the query text and filters."
)


class UniversalSearchService:
    """
    Searches spaces, pages, blog posts, attachments and comments at once.

    One request is issued per enabled category and all of them are awaited
    together. A failure in any category fails the whole search: there are no
    partial results, and requests already in flight are not cancelled.
    """

    def __init__(self, settings=None, client=None):
        self.settings = settings or get_settings()
        self.client = client or ConfluenceClient(self.settings)

    def clamp_limit(self, limit_per_type: Optional[int]) -> int:
        search_settings = self.settings.search
        if limit_per_type is None:
            return search_settings.default_limit_per_type
        return min(max(limit_per_type, 1), search_settings.max_limit_per_type)

    async def search(
        self,
        query: str,
        include_spaces: bool = True,
        include_pages: bool = True,
        include_blog_posts: bool = True,
        include_attachments: bool = True,
        include_comments: bool = True,
        space_key: Optional[str] = None,
        labels: Optional[Sequence[str]] = None,
        limit_per_type: Optional[int] = None,
    ) -> UniversalSearchResult:
        """
        Search every enabled content type for ``query``.

        Args:
            query: Text to search for (required)
            include_*: Category toggles
            space_key: Restrict non-space results to one space
            labels: Labels required on page and blog post results
            limit_per_type: Hits per category (clamped to 1-25, default 5)

        Returns:
            UniversalSearchResult with every category key present, or an
            advisory when there is nothing to run

        Raises:
            ConfluenceAPIError: If any category search fails
        """
        trimmed_query = (query or "").strip()
        limit = self.clamp_limit(limit_per_type)
        space = space_key.strip() if space_key and space_key.strip() else None
        cleaned_labels = [label.strip() for label in labels or [] if label.strip()] or None

        if not trimmed_query:
            logger.warning("Universal search called without a query string.")
            return UniversalSearchResult(
                query="",
                limit_per_type=limit,
                advisory=MISSING_QUERY_MESSAGE,
            )

        toggles = {
            "spaces": include_spaces,
            "pages": include_pages,
            "blog_posts": include_blog_posts,
            "attachments": include_attachments,
            "comments": include_comments,
        }
        included = [category for category in SEARCH_CATEGORIES if toggles[category]]

        result = UniversalSearchResult(
            query=trimmed_query,
            space_key=space,
            labels=cleaned_labels,
            limit_per_type=limit,
            included_types=included,
        )

        if not included:
            logger.warning("Universal search called with no content types enabled.")
            result.advisory = NO_TYPES_MESSAGE
            return result

        tasks = [
            self._search_category(category, trimmed_query, space, cleaned_labels, limit)
            for category in included
        ]

        try:
            resolved = await asyncio.gather(*tasks)
        except ConfluenceAPIError as e:
            enrich_bad_request(e, "Universal search", FILTER_HINT)
            raise

        for category, hits in resolved:
            result.results[category] = hits

        return result

    async def _search_category(
        self,
        category: str,
        query: str,
        space_key: Optional[str],
        labels: Optional[List[str]],
        limit: int,
    ) -> Tuple[str, List[SearchResultItem]]:
        cql = build_category_cql(category, query, space_key, labels)
        logger.debug(f"Executing universal search for {category} with CQL: {cql}")

        raw = await self.client.search(
            QueryDescriptor(
                cql=cql,
                limit=limit,
                excerpt="highlight",
                include_archived_spaces=False,
            )
        )
        try:
            response = SearchResponse.model_validate(raw)
        except ValidationError as e:
            logger.error(f"API response validation failed for {category}: {e}")
            raise ConfluenceAPIError(
                f"API response validation failed: {e}",
                status_code=500,
                original=e,
            ) from e
        return category, response.results
