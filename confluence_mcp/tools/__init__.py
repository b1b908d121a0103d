"""
Tools Module - MCP Tool Implementations

Search, universal search, page listing and comment tools.
"""

from confluence_mcp.tools import search
from confluence_mcp.tools import search_all
from confluence_mcp.tools import list_pages
from confluence_mcp.tools import comments

__all__ = [
    "search",
    "search_all",
    "list_pages",
    "comments",
]
