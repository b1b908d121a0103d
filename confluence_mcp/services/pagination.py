"""
Services - Pagination

Normalizes Confluence's cursor-linked and offset-counted paging envelopes.
"""

import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from confluence_mcp.schemas.search import PaginationInfo


class PaginationType(str, Enum):
    """Paging model used by the endpoint that produced a page."""
    CURSOR = "cursor"
    OFFSET = "offset"


_CURSOR_PARAM = re.compile(r"[?&]cursor=([^&#]+)")


def _next_link(raw: Mapping[str, Any]) -> Optional[str]:
    links = raw.get("_links") or {}
    return links.get("next") or None


def extract_cursor(next_link: str) -> str:
    """
    Pull the ``cursor`` parameter out of a next-page link.

    The token is returned exactly as it appears in the link (still
    URL-encoded). Links without a cursor parameter are returned whole.
    """
    match = _CURSOR_PARAM.search(next_link)
    if match:
        return match.group(1)
    return next_link


def extract_pagination_info(
    raw: Mapping[str, Any],
    mode: PaginationType,
    requested_limit: Optional[int] = None,
) -> PaginationInfo:
    """
    Build a PaginationInfo from a raw response payload.

    Args:
        raw: Response JSON containing ``results`` and a paging envelope
        mode: Paging model of the endpoint that returned ``raw``
        requested_limit: Page size the caller asked for (offset mode only);
            defaults to the payload's own ``limit``

    Returns:
        PaginationInfo. ``next_offset`` is never set here: offset callers
        add ``start + count`` themselves.
    """
    count = len(raw.get("results") or [])

    if mode == PaginationType.CURSOR:
        next_link = _next_link(raw)
        return PaginationInfo(
            count=count,
            has_more=next_link is not None,
            next_cursor=extract_cursor(next_link) if next_link else None,
        )

    # A full page is taken to mean more results follow. Confluence does not
    # always report a total, so an exactly-full last page reads as has_more.
    limit = requested_limit if requested_limit is not None else raw.get("limit")
    full_page = limit is not None and count > 0 and count == limit
    return PaginationInfo(
        count=count,
        has_more=bool(full_page or raw.get("hasMore")),
    )


def with_next_offset(pagination: PaginationInfo, start: int) -> PaginationInfo:
    """Return a copy carrying ``next_offset`` when another page exists."""
    if not pagination.has_more:
        return pagination
    update: Dict[str, Any] = {"next_offset": start + pagination.count}
    return pagination.model_copy(update=update)
