"""
Confluence MCP - Command Line Interface

Search, list pages and list comments from the terminal, or start the server.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from confluence_mcp.config import configure_logging, get_settings
from confluence_mcp.errors import ConfluenceAPIError
from confluence_mcp.schemas.page import ListPagesOptions
from confluence_mcp.schemas.search import FilterSet
from confluence_mcp.services import (
    CommentsService,
    PagesService,
    SearchService,
    UniversalSearchService,
)
from confluence_mcp.services.formatter import (
    format_comments_list,
    format_inline_comments_list,
    format_pages_list,
    format_search_results,
    format_universal_results,
)

logger = logging.getLogger(__name__)


def limit_per_type(value: str) -> int:
    """argparse type for --limit-per-type; the upper bound is checked against settings."""
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("Must be a positive integer.")
    if limit <= 0:
        raise argparse.ArgumentTypeError("Must be a positive integer.")
    return limit


async def run_search(args, settings) -> str:
    service = SearchService(settings)
    filters = FilterSet(
        query=args.query,
        title=args.title,
        space_key=args.space_key,
        space_ids=args.space_ids,
        labels=args.labels,
        content_type=args.type,
        cql=args.cql,
    )
    outcome = await service.search(filters, limit=args.limit, cursor=args.cursor)
    if outcome.advisory:
        return outcome.advisory
    return format_search_results(
        outcome.results,
        cql=outcome.cql,
        pagination=outcome.pagination,
        base_url=settings.confluence.base_url,
    )


async def run_search_all(args, settings) -> str:
    maximum = settings.search.max_limit_per_type
    if args.limit_per_type is not None and args.limit_per_type > maximum:
        raise ValueError(f"--limit-per-type: Maximum allowed is {maximum}.")

    service = UniversalSearchService(settings)
    result = await service.search(
        query=args.query,
        include_spaces=args.spaces,
        include_pages=args.pages,
        include_blog_posts=args.blog_posts,
        include_attachments=args.attachments,
        include_comments=args.comments,
        space_key=args.space_key,
        labels=args.labels,
        limit_per_type=args.limit_per_type,
    )
    if result.advisory:
        return result.advisory
    return format_universal_results(result, base_url=settings.confluence.base_url)


async def run_ls_pages(args, settings) -> str:
    service = PagesService(settings)
    options = ListPagesOptions(
        space_ids=args.space_ids,
        space_keys=args.space_keys,
        title=args.title,
        status=args.status,
        parent_id=args.parent_id,
        sort=args.sort,
        limit=args.limit,
        cursor=args.cursor,
    )
    result = await service.list_pages(options)
    return format_pages_list(result, base_url=settings.confluence.base_url)


async def run_ls_comments(args, settings) -> str:
    service = CommentsService(settings)
    result = await service.list_page_comments(args.page_id, limit=args.limit, start=args.start)
    return format_comments_list(result, base_url=settings.confluence.base_url)


async def run_ls_inline_comments(args, settings) -> str:
    service = CommentsService(settings)
    result = await service.list_inline_comments(
        args.page_id,
        include_resolved=args.include_resolved,
        sort_by=args.sort_by,
        limit=args.limit,
        start=args.start,
    )
    return format_inline_comments_list(result, base_url=settings.confluence.base_url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="confluence-mcp",
        description="Search and browse Confluence from the command line",
    )
    subparsers = parser.add_subparsers(dest="command")

    search = subparsers.add_parser("search", help="Search content with CQL filters")
    search.add_argument("-q", "--query", help="Free-text search (text ~ ...)")
    search.add_argument("-t", "--title", help="Text to match in titles")
    search.add_argument("-k", "--space-key", help="Restrict to a space key")
    search.add_argument("--space-ids", nargs="+", help="Restrict to any of these space IDs")
    search.add_argument("-l", "--labels", nargs="+", help="Labels that must all match")
    search.add_argument(
        "--type",
        choices=["page", "blogpost", "attachment", "comment", "space"],
        help="Content type",
    )
    search.add_argument("--cql", help="Raw CQL ANDed with the other filters")
    search.add_argument("--limit", type=int, default=None, help="Maximum results")
    search.add_argument("--cursor", help="Cursor from a previous page")
    search.set_defaults(handler=run_search)

    search_all = subparsers.add_parser(
        "search-all",
        help="Search pages, blog posts, spaces, attachments and comments at once",
    )
    search_all.add_argument("-q", "--query", required=True, help="Text to search for")
    search_all.add_argument("--space-key", help="Restrict non-space results to a space")
    search_all.add_argument("--labels", nargs="+", help="Labels required on pages and blog posts")
    search_all.add_argument(
        "--limit-per-type",
        type=limit_per_type,
        default=None,
        help="Results per content type (default 5)",
    )
    for flag, dest, label in (
        ("--no-spaces", "spaces", "spaces"),
        ("--no-pages", "pages", "pages"),
        ("--no-blog-posts", "blog_posts", "blog posts"),
        ("--no-attachments", "attachments", "attachments"),
        ("--no-comments", "comments", "comments"),
    ):
        search_all.add_argument(
            flag, dest=dest, action="store_false", help=f"Exclude {label}"
        )
    search_all.set_defaults(handler=run_search_all)

    ls_pages = subparsers.add_parser("ls-pages", help="List pages")
    ls_pages.add_argument("--space-ids", nargs="+", help="Space IDs")
    ls_pages.add_argument("--space-keys", nargs="+", help="Space keys")
    ls_pages.add_argument("-t", "--title", help="Title (exact, then partial match)")
    ls_pages.add_argument("--status", nargs="+", help="Page statuses")
    ls_pages.add_argument("--parent-id", help="Parent page ID")
    ls_pages.add_argument("--sort", help="Sort order, e.g. -modified-date")
    ls_pages.add_argument("--limit", type=int, default=None, help="Maximum pages")
    ls_pages.add_argument("--cursor", help="Cursor from a previous page")
    ls_pages.set_defaults(handler=run_ls_pages)

    ls_comments = subparsers.add_parser("ls-comments", help="List comments on a page")
    ls_comments.add_argument("page_id", help="Confluence page ID")
    ls_comments.add_argument("--limit", type=int, default=None, help="Maximum comments")
    ls_comments.add_argument("--start", type=int, default=0, help="Pagination offset")
    ls_comments.set_defaults(handler=run_ls_comments)

    ls_inline = subparsers.add_parser(
        "ls-inline-comments", help="List inline comments on a page"
    )
    ls_inline.add_argument("page_id", help="Confluence page ID")
    ls_inline.add_argument(
        "--include-resolved", action="store_true", help="Include resolved comments"
    )
    ls_inline.add_argument(
        "--sort-by", choices=["position", "created"], default="position", help="Sort order"
    )
    ls_inline.add_argument("--limit", type=int, default=None, help="Maximum comments")
    ls_inline.add_argument("--start", type=int, default=0, help="Pagination offset")
    ls_inline.set_defaults(handler=run_ls_inline_comments)

    serve = subparsers.add_parser("serve", help="Start the MCP server")
    serve.add_argument("--transport", choices=["stdio", "sse"], default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "serve":
        from confluence_mcp.server import run
        run(transport=args.transport, port=args.port)
        return 0

    settings = get_settings()
    configure_logging(settings)

    try:
        output = asyncio.run(args.handler(args, settings))
    except (ConfluenceAPIError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
