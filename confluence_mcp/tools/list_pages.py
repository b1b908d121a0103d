"""
MCP Tool - conf_ls_pages

List pages with smart title matching.
"""

from fastmcp import FastMCP
from typing import List, Optional

from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.page import ListPagesOptions
from confluence_mcp.services import PagesService
from confluence_mcp.services.formatter import format_pages_list

router = FastMCP("conf_ls_pages")


@router.tool(name="conf_ls_pages")
async def conf_ls_pages(
    space_ids: Optional[List[str]] = None,
    space_keys: Optional[List[str]] = None,
    parent_id: Optional[str] = None,
    page_title: Optional[str] = None,
    status: Optional[List[str]] = None,
    sort: Optional[str] = None,
    limit: int = 25,
    cursor: Optional[str] = None,
) -> dict:
    """
    List Confluence pages, optionally filtered by space, parent or title.

    Title filtering tries an exact match first and, on the first page only,
    falls back to a partial match ("Balance" finds "Balance Reconciliation").

    Args:
        space_ids: Space IDs to list from
        space_keys: Space keys to list from
        parent_id: Only children of this page
        page_title: Title to match
        status: Page statuses (current, archived, ...)
        sort: Sort order, e.g. -modified-date
        limit: Maximum pages (default 25)
        cursor: Cursor from a previous page

    Returns:
        Pages, pagination, whether a partial match was used, and Markdown
    """
    service = PagesService()

    try:
        options = ListPagesOptions(
            space_ids=space_ids,
            space_keys=space_keys,
            parent_id=parent_id,
            title=page_title,
            status=status,
            sort=sort,
            limit=limit,
            cursor=cursor,
        )
        result = await service.list_pages(options)
    except (ConfluenceAPIError, ValueError) as e:
        return {"error": str(e)}

    return {
        "results": [p.model_dump(by_alias=True) for p in result.pages.results],
        "pagination": result.pagination.model_dump(),
        "partial_match": result.partial_match,
        "markdown": format_pages_list(
            result, base_url=service.settings.confluence.base_url
        ),
    }
