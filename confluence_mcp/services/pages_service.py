"""
Services - Pages Service

Page listing with hybrid title resolution: exact title match through the
pages endpoint first, wildcard CQL title search second.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from confluence_mcp.client import ConfluenceClient
from confluence_mcp.config import get_settings
from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.page import (
    ListPagesOptions,
    PageLinks,
    PageListResult,
    PageRecord,
    PagesResponse,
    PageVersion,
)
from confluence_mcp.schemas.search import (
    QueryDescriptor,
    SearchResponse,
    SearchResultItem,
)
from confluence_mcp.services.cql import build_partial_title_cql
from confluence_mcp.services.pagination import PaginationType, extract_pagination_info

logger = logging.getLogger(__name__)


@dataclass
class FallbackDecision:
    """Whether the partial title search may run for a request, and whether it did."""
    permitted: bool
    taken: bool = False


def page_from_search_hit(hit: SearchResultItem) -> PageRecord:
    """
    Map a search hit onto the canonical page record.

    The search API returns no authorship or version data, so those fields get
    fixed placeholders (version 1, empty author ids).
    """
    content = hit.content
    timestamp = hit.last_modified or datetime.now(timezone.utc).isoformat()
    url = hit.url or ""

    return PageRecord(
        id=content.id,
        status=content.status or "current",
        title=content.title or hit.title or "",
        space_id=hit.space.id if hit.space and hit.space.id else "",
        parent_id=None,
        parent_type=None,
        position=None,
        author_id="",
        created_at=timestamp,
        version=PageVersion(number=1, author_id="", message="", created_at=timestamp),
        links=PageLinks(webui=url, editui=url, tinyui=url),
    )


def search_results_to_pages(
    search: SearchResponse,
    content_type: str = "page",
) -> PagesResponse:
    """Keep hits of ``content_type`` that carry an id and convert them to pages."""
    pages = [
        page_from_search_hit(hit)
        for hit in search.results
        if hit.content and hit.content.type == content_type and hit.content.id
    ]
    logger.debug(f"Transformed {len(pages)} search results to pages format")

    response = PagesResponse()
    response.links.base = search.links.base or ""
    response.results = pages
    return response


class PagesService:
    """Lists pages, falling back to partial title matching when needed."""

    def __init__(self, settings=None, client=None):
        self.settings = settings or get_settings()
        self.client = client or ConfluenceClient(self.settings)

    async def list_pages(self, options: ListPagesOptions) -> PageListResult:
        """
        List pages matching the given filters.

        When a title filter finds no exact match on the first page, a
        wildcard title search is tried and its hits are returned instead.

        Args:
            options: Space, title, status, parent, sort and paging filters

        Returns:
            PageListResult with cursor pagination; ``partial_match`` is True
            when the results came from the fallback search

        Raises:
            ConfluenceAPIError: If the primary request fails or its payload
                does not validate
        """
        space_ids = list(options.space_ids or [])
        if options.space_keys:
            space_ids.extend(await self._space_ids_for_keys(options.space_keys))

        params = self._list_params(options, space_ids)
        logger.debug(f"Listing Confluence pages with params: {params}")

        raw = await self.client.list_pages(params)
        try:
            primary = PagesResponse.model_validate(raw)
        except ValidationError as e:
            logger.error(f"API response validation failed: {e}")
            raise ConfluenceAPIError(
                f"API response validation failed: {e}",
                status_code=500,
                original=e,
            ) from e

        decision = FallbackDecision(
            permitted=bool(options.title) and not options.cursor and not primary.results
        )

        if decision.permitted:
            logger.info(
                f'Exact title match failed for "{options.title}", attempting partial search'
            )
            fallback = await self.partial_title_search(
                options.title, space_ids, options.limit
            )
            if fallback.results:
                decision.taken = True
                logger.info(f"Partial title search found {len(fallback.results)} results")
                return PageListResult(
                    pages=fallback,
                    pagination=extract_pagination_info(
                        fallback.model_dump(by_alias=True), PaginationType.CURSOR
                    ),
                    partial_match=True,
                )
            logger.debug("Partial title search also returned no results")

        return PageListResult(
            pages=primary,
            pagination=extract_pagination_info(raw, PaginationType.CURSOR),
        )

    async def partial_title_search(
        self,
        title: str,
        space_ids: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> PagesResponse:
        """
        Wildcard title search through CQL, mapped to the pages shape.

        Never raises: a failed search is logged and yields an empty response.
        The result is a single page; its next link is not carried over.
        """
        space_keys = await self._space_keys_for_ids(space_ids) if space_ids else []
        cql = build_partial_title_cql(title, space_keys, content_type="page")
        logger.debug(f"Executing CQL query for partial title search: {cql}")

        descriptor = QueryDescriptor(
            cql=cql,
            limit=limit or self.settings.search.fallback_limit,
        )

        try:
            raw = await self.client.search(descriptor)
            search = SearchResponse.model_validate(raw)
        except Exception as e:
            logger.error(f"Error in partial title search: {e}")
            return PagesResponse()

        logger.debug(f"Partial title search returned {len(search.results)} results")
        return search_results_to_pages(search, content_type="page")

    async def _space_keys_for_ids(self, space_ids: List[str]) -> List[str]:
        """Resolve space ids to keys; lookup failures drop the space constraint."""
        batch = self.settings.search.space_lookup_batch
        keys: List[str] = []

        try:
            for i in range(0, len(space_ids), batch):
                chunk = space_ids[i:i + batch]
                response = await self.client.list_spaces(ids=chunk, limit=batch)
                keys.extend(
                    space["key"] for space in response.get("results", []) if space.get("key")
                )
        except Exception as e:
            logger.warning(f"Failed to lookup space keys, searching all spaces: {e}")
            return []

        if not keys:
            logger.warning("No spaces found for provided IDs, searching all spaces")
        else:
            logger.debug(f"Added space key filtering to CQL: {keys}")
        return keys

    async def _space_ids_for_keys(self, space_keys: List[str]) -> List[str]:
        """Resolve space keys to the ids the pages endpoint filters on."""
        batch = self.settings.search.space_lookup_batch
        ids: List[str] = []

        for i in range(0, len(space_keys), batch):
            chunk = space_keys[i:i + batch]
            response = await self.client.list_spaces(keys=chunk, limit=batch)
            ids.extend(
                str(space["id"]) for space in response.get("results", []) if space.get("id")
            )

        if not ids:
            raise ConfluenceAPIError(
                f"No spaces found for keys: {', '.join(space_keys)}",
                status_code=404,
            )
        return ids

    def _list_params(self, options: ListPagesOptions, space_ids: List[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "limit": options.limit or self.settings.search.default_page_size,
        }
        if space_ids:
            params["space-id"] = ",".join(space_ids)
        if options.title:
            params["title"] = options.title
        if options.status:
            params["status"] = ",".join(options.status)
        if options.parent_id:
            params["parent-id"] = options.parent_id
        if options.sort:
            params["sort"] = options.sort
        if options.cursor:
            params["cursor"] = options.cursor
        return params
