"""
MCP Tool - conf_search_all

One query across spaces, pages, blog posts, attachments and comments.
"""

from fastmcp import FastMCP
from typing import List, Optional

from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.services import UniversalSearchService
from confluence_mcp.services.formatter import format_universal_results

router = FastMCP("conf_search_all")


@router.tool(name="conf_search_all")
async def conf_search_all(
    query: str,
    space_key: Optional[str] = None,
    labels: Optional[List[str]] = None,
    include_spaces: bool = True,
    include_pages: bool = True,
    include_blog_posts: bool = True,
    include_attachments: bool = True,
    include_comments: bool = True,
    limit_per_type: int = 5,
) -> dict:
    """
    Search several Confluence content types at once.

    Results are grouped by content type with highlight excerpts.

    Args:
        query: Text to search for (required)
        space_key: Restrict pages, blog posts, attachments and comments to a space
        labels: Labels required on page and blog post results
        include_*: Enable or disable a content type (all enabled by default)
        limit_per_type: Results per content type (1-25, default 5)

    Returns:
        Results keyed by content type plus a Markdown rendering
    """
    service = UniversalSearchService()

    try:
        result = await service.search(
            query=query,
            include_spaces=include_spaces,
            include_pages=include_pages,
            include_blog_posts=include_blog_posts,
            include_attachments=include_attachments,
            include_comments=include_comments,
            space_key=space_key,
            labels=labels,
            limit_per_type=limit_per_type,
        )
    except (ConfluenceAPIError, ValueError) as e:
        return {"error": str(e)}

    if result.advisory:
        return {"message": result.advisory}

    return {
        "query": result.query,
        "limit_per_type": result.limit_per_type,
        "included_types": result.included_types,
        "results": {
            category: [hit.model_dump(by_alias=True, exclude_none=True) for hit in hits]
            for category, hits in result.results.items()
        },
        "markdown": format_universal_results(
            result, base_url=service.settings.confluence.base_url
        ),
    }
