"""
MCP Tool - conf_search

CQL search across Confluence content.
"""

from fastmcp import FastMCP
from typing import List, Literal, Optional

from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.search import FilterSet
from confluence_mcp.services import SearchService
from confluence_mcp.services.formatter import format_search_results

router = FastMCP("conf_search")


@router.tool(name="conf_search")
async def conf_search(
    query: Optional[str] = None,
    search_title: Optional[str] = None,
    space_key: Optional[str] = None,
    space_ids: Optional[List[str]] = None,
    labels: Optional[List[str]] = None,
    content_type: Optional[Literal["page", "blogpost", "attachment", "comment", "space"]] = None,
    cql: Optional[str] = None,
    limit: int = 25,
    cursor: Optional[str] = None,
) -> dict:
    """
    Search Confluence content with CQL.

    Filters are combined with AND. ``query`` performs a text search
    (text ~ "..."), ``search_title`` a title search. A raw ``cql`` string is
    ANDed with the other filters; quote terms in text searches
    (text ~ "your terms") or Confluence rejects the query.

    Args:
        query: Free-text search
        search_title: Text to match in titles
        space_key: Restrict to one space
        space_ids: Restrict to any of these space IDs
        labels: Labels that must all be present
        content_type: page, blogpost, attachment, comment or space
        cql: Raw CQL combined with the other filters
        limit: Maximum results (1-100, default 25)
        cursor: Cursor from a previous page

    Returns:
        Executed CQL, results, pagination and a Markdown rendering
    """
    service = SearchService()

    filters = FilterSet(
        query=query,
        title=search_title,
        space_key=space_key,
        space_ids=space_ids,
        labels=labels,
        content_type=content_type,
        cql=cql,
    )

    try:
        outcome = await service.search(filters, limit=limit, cursor=cursor)
    except (ConfluenceAPIError, ValueError) as e:
        return {"error": str(e)}

    if outcome.advisory:
        return {"message": outcome.advisory}

    return {
        "cql": outcome.cql,
        "results": [r.model_dump(by_alias=True, exclude_none=True) for r in outcome.results],
        "pagination": outcome.pagination.model_dump(),
        "markdown": format_search_results(
            outcome.results,
            cql=outcome.cql,
            pagination=outcome.pagination,
            base_url=service.settings.confluence.base_url,
        ),
    }
