"""
Services Module - Business Logic Layer

Provides CQL search, universal search, page listing and comment services.
"""

from confluence_mcp.services.search_service import SearchService
from confluence_mcp.services.universal_search_service import UniversalSearchService
from confluence_mcp.services.pages_service import PagesService
from confluence_mcp.services.comments_service import CommentsService

__all__ = [
    "SearchService",
    "UniversalSearchService",
    "PagesService",
    "CommentsService",
]
