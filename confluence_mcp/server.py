"""
Confluence MCP Server - Main Entry Point

FastMCP server with STDIO and SSE transport support.
"""

import argparse
from fastmcp import FastMCP

from confluence_mcp.config import configure_logging, get_settings

# Import tools (registered on their routers with decorators)
from confluence_mcp.tools import (
    search,
    search_all,
    list_pages,
    comments,
)


def create_app() -> FastMCP:
    """Create and configure the MCP application."""
    mcp = FastMCP(
        name="confluence-mcp",
        instructions="CQL search, universal search, page listing and comments for Confluence",
    )

    # Register all tools
    mcp.mount(search.router)
    mcp.mount(search_all.router)
    mcp.mount(list_pages.router)
    mcp.mount(comments.router)

    return mcp


def run(transport=None, port=None):
    """Run the server with settings-derived defaults."""
    settings = get_settings()
    configure_logging(settings)

    transport = transport or settings.mcp.transport
    port = port or settings.mcp.port

    mcp = create_app()

    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport="sse", host=settings.mcp.host, port=port)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Confluence MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default=None,
        help="Transport protocol (default: from env)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for SSE transport (default: from env)"
    )
    args = parser.parse_args()

    run(transport=args.transport, port=args.port)


if __name__ == "__main__":
    main()
