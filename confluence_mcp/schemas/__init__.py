"""
Schemas Module - Pydantic Models

Data models for CQL filters, search hits, pages and comments.
"""

from confluence_mcp.schemas.search import (
    FilterSet,
    QueryDescriptor,
    PaginationInfo,
    SearchResultItem,
    SearchResponse,
    SearchOutcome,
    UniversalSearchResult,
    SEARCH_CATEGORIES,
)
from confluence_mcp.schemas.page import (
    PageRecord,
    PagesResponse,
    ListPagesOptions,
    PageListResult,
)
from confluence_mcp.schemas.comment import (
    CommentRecord,
    CommentsResponse,
    RenderedComment,
    CommentListResult,
)

__all__ = [
    "FilterSet",
    "QueryDescriptor",
    "PaginationInfo",
    "SearchResultItem",
    "SearchResponse",
    "SearchOutcome",
    "UniversalSearchResult",
    "SEARCH_CATEGORIES",
    "PageRecord",
    "PagesResponse",
    "ListPagesOptions",
    "PageListResult",
    "CommentRecord",
    "CommentsResponse",
    "RenderedComment",
    "CommentListResult",
]
