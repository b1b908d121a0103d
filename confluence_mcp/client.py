"""
Confluence REST Client

Thin async wrapper over the Confluence REST API (v1 search/comments, v2
pages/spaces). Returns raw JSON payloads; validation belongs to the services.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from confluence_mcp.config import get_settings
from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.search import QueryDescriptor

logger = logging.getLogger(__name__)

COMMENT_EXPAND = "body.storage,extensions.inlineProperties,extensions.resolution"


class ConfluenceClient:
    """Executes CQL searches and list requests against Confluence."""

    def __init__(
        self,
        settings=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.confluence.base_url.rstrip("/")
        self.timeout = self.settings.confluence.timeout_seconds
        self._transport = transport

        username = self.settings.confluence.username
        api_token = self.settings.confluence.api_token
        self.auth = (username, api_token) if username and api_token else None

    async def search(self, descriptor: QueryDescriptor) -> Dict[str, Any]:
        """
        Run a CQL search.

        Args:
            descriptor: CQL plus paging and excerpt options

        Returns:
            Raw ``/rest/api/search`` payload (cursor-paginated)
        """
        params: Dict[str, Any] = {
            "cql": descriptor.cql,
            "limit": descriptor.limit,
            "includeArchivedSpaces": str(descriptor.include_archived_spaces).lower(),
        }
        if descriptor.cursor:
            params["cursor"] = descriptor.cursor
        if descriptor.start is not None:
            params["start"] = descriptor.start
        if descriptor.excerpt:
            params["excerpt"] = descriptor.excerpt

        return await self._get("/rest/api/search", params)

    async def list_pages(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """List pages via ``/api/v2/pages`` (cursor-paginated)."""
        return await self._get("/api/v2/pages", params)

    async def list_spaces(
        self,
        ids: Optional[List[str]] = None,
        keys: Optional[List[str]] = None,
        limit: int = 100,
    ) -> Dict[str, Any]:
        """
        Look up spaces by id or key.

        Args:
            ids: Space ids to resolve
            keys: Space keys to resolve
            limit: Maximum spaces to return

        Returns:
            Raw ``/api/v2/spaces`` payload with ``{id, key, name}`` results
        """
        params: Dict[str, Any] = {"limit": limit}
        if ids:
            params["ids"] = ",".join(ids)
        if keys:
            params["keys"] = ",".join(keys)
        return await self._get("/api/v2/spaces", params)

    async def list_page_comments(
        self,
        page_id: str,
        start: int = 0,
        limit: int = 25,
    ) -> Dict[str, Any]:
        """List comments on a page (offset-paginated)."""
        if not page_id.isalnum():
            raise ValueError(f"Invalid page_id: {page_id}. Must be alphanumeric.")

        params = {"start": start, "limit": limit, "expand": COMMENT_EXPAND}
        return await self._get(f"/rest/api/content/{page_id}/child/comment", params)

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={params}")

        async with httpx.AsyncClient(
            auth=self.auth,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                raise ConfluenceAPIError(
                    f"Confluence API request to {path} failed with status {status}: "
                    f"{_error_detail(e.response)}",
                    status_code=status,
                    original=e,
                ) from e
            except httpx.HTTPError as e:
                raise ConfluenceAPIError(
                    f"Confluence API request to {path} failed: {e}",
                    original=e,
                ) from e

            try:
                return response.json()
            except ValueError as e:
                raise ConfluenceAPIError(
                    f"Confluence API request to {path} returned a non-JSON body "
                    f"(status {response.status_code})",
                    status_code=response.status_code,
                    original=e,
                ) from e


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of Confluence's error message."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        errors = data.get("errors") or []
        if errors and isinstance(errors[0], dict):
            return str(errors[0].get("title") or errors[0].get("detail") or errors[0])
    return response.text
