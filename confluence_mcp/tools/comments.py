"""
MCP Tools - conf_ls_page_comments, conf_ls_inline_comments

Comment listings for a page.
"""

from fastmcp import FastMCP
from typing import Literal

from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.services import CommentsService
from confluence_mcp.services.formatter import (
    format_comments_list,
    format_inline_comments_list,
)

router = FastMCP("conf_comments")


def _to_dict(result, markdown: str) -> dict:
    return {
        "page_id": result.page_id,
        "comments": [
            {
                "id": c.comment.id,
                "title": c.comment.title,
                "status": c.comment.status,
                "body": c.markdown_body,
                "highlighted_text": c.highlighted_text,
            }
            for c in result.comments
        ],
        "pagination": result.pagination.model_dump(),
        "total_count": result.total_count,
        "markdown": markdown,
    }


@router.tool(name="conf_ls_page_comments")
async def conf_ls_page_comments(
    page_id: str,
    limit: int = 25,
    start: int = 0,
) -> dict:
    """
    List comments on a Confluence page.

    Args:
        page_id: Confluence page ID
        limit: Maximum comments (default 25)
        start: Offset for pagination

    Returns:
        Comments with Markdown bodies, offset pagination and Markdown output
    """
    service = CommentsService()

    try:
        result = await service.list_page_comments(page_id, limit=limit, start=start)
    except (ConfluenceAPIError, ValueError) as e:
        return {"error": str(e)}

    base_url = service.settings.confluence.base_url
    return _to_dict(result, format_comments_list(result, base_url=base_url))


@router.tool(name="conf_ls_inline_comments")
async def conf_ls_inline_comments(
    page_id: str,
    include_resolved: bool = False,
    sort_by: Literal["created", "position"] = "position",
    limit: int = 25,
    start: int = 0,
) -> dict:
    """
    List inline comments on a Confluence page with the text they highlight.

    Args:
        page_id: Confluence page ID
        include_resolved: Include resolved comments
        sort_by: position (document order) or created
        limit: Maximum comments (default 25)
        start: Offset for pagination

    Returns:
        Inline comments, offset pagination and Markdown output
    """
    service = CommentsService()

    try:
        result = await service.list_inline_comments(
            page_id,
            include_resolved=include_resolved,
            sort_by=sort_by,
            limit=limit,
            start=start,
        )
    except (ConfluenceAPIError, ValueError) as e:
        return {"error": str(e)}

    base_url = service.settings.confluence.base_url
    return _to_dict(result, format_inline_comments_list(result, base_url=base_url))
