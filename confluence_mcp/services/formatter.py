"""
Services - Markdown Formatter

Renders search hits, universal search sections, page lists and comments as
Markdown for CLI and MCP tool output.
"""

import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup
from markdownify import markdownify as md

from confluence_mcp.schemas.comment import CommentListResult
from confluence_mcp.schemas.page import PageListResult, PageRecord
from confluence_mcp.schemas.search import (
    PaginationInfo,
    SearchResultItem,
    UniversalSearchResult,
)

HTTP_REGEX = re.compile(r"^https?://", re.IGNORECASE)

SECTION_TITLES = {
    "spaces": "Spaces",
    "pages": "Pages",
    "blog_posts": "Blog posts",
    "attachments": "Attachments",
    "comments": "Comments",
}


def format_heading(text: str, level: int = 1) -> str:
    return f"{'#' * max(1, min(level, 6))} {text}"


def format_separator() -> str:
    return "---"


def format_date(value: Optional[datetime] = None) -> str:
    return (value or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def format_bullet_list(items: Dict[str, Any]) -> str:
    """Render ``{label: value}`` as bold-keyed bullets, skipping empty values."""
    lines = []
    for key, value in items.items():
        if value is None or value == "":
            continue
        if isinstance(value, dict) and "url" in value:
            value = f"[{value.get('title') or value['url']}]({value['url']})"
        lines.append(f"- **{key}**: {value}")
    return "\n".join(lines)


def format_numbered_list(items: Sequence[Any], render: Callable[[Any], str]) -> str:
    return "\n\n".join(f"{i}. {render(item)}" for i, item in enumerate(items, start=1))


def format_footer() -> str:
    return f"{format_separator()}\n*Information retrieved at: {format_date()}*"


def format_pagination(pagination: PaginationInfo) -> str:
    """Summarize a PaginationInfo for the end of a listing."""
    lines = [f"*Showing {pagination.count} item{'s' if pagination.count != 1 else ''}.*"]
    if pagination.has_more:
        if pagination.next_cursor:
            lines.append(
                f"*More results are available. Use `--cursor \"{pagination.next_cursor}\"`"
                " to view the next page.*"
            )
        elif pagination.next_offset is not None:
            lines.append(
                f"*More results are available. Use `--start {pagination.next_offset}`"
                " to view the next page.*"
            )
        else:
            lines.append("*More results are available.*")
    return "\n".join(lines)


def storage_to_markdown(html: str) -> str:
    """Convert Confluence storage-format HTML to Markdown."""
    soup = BeautifulSoup(html, "html.parser")
    markdown = md(str(soup), heading_style="ATX")
    return re.sub(r"\n{3,}", "\n\n", markdown).strip()


def clean_excerpt(excerpt: str) -> str:
    """Turn a highlighted search excerpt into single-line Markdown."""
    text = excerpt.replace("@@@hl@@@", "**").replace("@@@endhl@@@", "**")
    text = BeautifulSoup(text, "html.parser").get_text(" ")
    return " ".join(text.split())


def ensure_absolute_url(url_or_path: str, base_url: Optional[str] = None) -> str:
    """
    Make a Confluence link absolute.

    Relative paths are joined to ``base_url`` without duplicating a ``/wiki``
    prefix. Absolute URLs, and paths with no base to join, are returned as-is.
    """
    trimmed = (url_or_path or "").strip()
    if not trimmed or HTTP_REGEX.match(trimmed) or not base_url:
        return trimmed

    base = base_url.strip().rstrip("/")
    if trimmed.startswith("/"):
        if base.endswith("/wiki") and trimmed.startswith("/wiki"):
            return f"{base}{trimmed[len('/wiki'):]}"
        return f"{base}{trimmed}"

    if base.endswith("/wiki") and trimmed.startswith("wiki/"):
        trimmed = trimmed[len("wiki/"):]
    return f"{base}/{trimmed}"


def format_search_result_item(result: SearchResultItem, base_url: Optional[str] = None) -> str:
    content = result.content
    title = result.title or (content.title if content else None) or "Untitled Result"

    properties: Dict[str, Any] = {
        "ID": (content.id if content else None) or "N/A",
        "Type": (content.type if content else None) or result.entity_type or "N/A",
        "Status": (content.status if content else None) or "N/A",
        "Space": (result.space.name if result.space else None)
        or (result.result_global_container.title if result.result_global_container else None)
        or "N/A",
    }
    if result.space and result.space.id:
        properties["Space ID"] = result.space.id

    raw_url = (
        result.url
        or (content.links.webui if content else None)
        or (result.result_global_container.display_url if result.result_global_container else None)
    )
    if raw_url:
        properties["URL"] = {
            "url": ensure_absolute_url(raw_url, base_url),
            "title": "View in Confluence",
        }

    if result.excerpt:
        properties["Excerpt"] = clean_excerpt(result.excerpt)

    modified = result.last_modified or result.friendly_last_modified
    if modified:
        properties["Modified"] = modified

    return f"{format_heading(title, 2)}\n{format_bullet_list(properties)}"


def format_search_results(
    results: List[SearchResultItem],
    cql: str = "",
    pagination: Optional[PaginationInfo] = None,
    base_url: Optional[str] = None,
) -> str:
    lines: List[str] = []

    if cql:
        lines.append(f"{format_heading('Executed CQL Query', 3)}\n`{cql}`\n")

    if not results:
        lines.append("No Confluence content found matching your query.\n")
    else:
        lines.append(format_heading("Confluence Search Results", 1))
        lines.append("")
        lines.append(
            format_numbered_list(results, lambda r: format_search_result_item(r, base_url))
        )
        lines.append("")

    lines.append(format_footer())
    if pagination:
        lines.append("")
        lines.append(format_pagination(pagination))
    return "\n".join(lines)


def format_universal_results(result: UniversalSearchResult, base_url: Optional[str] = None) -> str:
    """Render one section per included category, including empty ones."""
    lines = [format_heading("Confluence Universal Search", 1), ""]

    summary: Dict[str, Any] = {
        "Query": f"`{result.query}`",
        "Limit per type": (
            f"{result.limit_per_type} result{'' if result.limit_per_type == 1 else 's'}"
            " per category"
        ),
        "Included types": ", ".join(SECTION_TITLES[t] for t in result.included_types),
    }
    if result.space_key:
        summary["Space filter"] = result.space_key
    if result.labels:
        summary["Label filter"] = ", ".join(result.labels)

    lines.append(format_heading("Search Summary", 2))
    lines.append(format_bullet_list(summary))
    lines.append("")

    total = 0
    for category in result.included_types:
        hits = result.results.get(category, [])
        total += len(hits)
        lines.append(format_heading(f"{SECTION_TITLES[category]} ({len(hits)})", 2))
        if not hits:
            lines.append("_No results found in this category._")
        else:
            lines.append(
                format_numbered_list(hits, lambda r: format_search_result_item(r, base_url))
            )
        lines.append("")

    if total == 0:
        lines.append(
            "_No matches were found across the selected content types. "
            "Try broadening your query or enabling more result types._"
        )
        lines.append("")

    lines.append(format_footer())
    lines.append(
        "_Tip: use `conf_search` (tool) or `confluence-mcp search` (CLI) "
        "for advanced CQL filtering or pagination._"
    )
    return "\n".join(lines).strip()


def format_page_item(page: PageRecord, base_url: Optional[str] = None) -> str:
    properties: Dict[str, Any] = {
        "ID": page.id,
        "Status": page.status,
        "Space ID": page.space_id or "N/A",
        "Author ID": page.author_id or "N/A",
        "Version": page.version.number if page.version else "N/A",
        "Created": page.created_at,
    }
    if page.links.webui:
        properties["URL"] = {
            "url": ensure_absolute_url(page.links.webui, base_url),
            "title": "View in Confluence",
        }
    return f"{format_heading(page.title or 'Untitled Page', 2)}\n{format_bullet_list(properties)}"


def format_pages_list(result: PageListResult, base_url: Optional[str] = None) -> str:
    pages = result.pages.results
    if not pages:
        body = "No Confluence pages found matching your criteria."
    else:
        lines = [format_heading("Confluence Pages", 1), ""]
        if result.partial_match:
            lines.append("_No exact title match; showing partial title matches._")
            lines.append("")
        lines.append(format_numbered_list(pages, lambda p: format_page_item(p, base_url)))
        body = "\n".join(lines)

    return f"{body}\n\n{format_footer()}\n\n{format_pagination(result.pagination)}"


def format_comments_list(result: CommentListResult, base_url: Optional[str] = None) -> str:
    if not result.comments:
        body = f"No comments found for page {result.page_id}."
    else:
        lines = [format_heading(f"Comments for Page {result.page_id}", 1), ""]
        for i, rendered in enumerate(result.comments, start=1):
            comment = rendered.comment
            lines.append(format_heading(f"{i}. {comment.title or f'Comment {comment.id}'}", 2))
            properties: Dict[str, Any] = {
                "ID": comment.id,
                "Status": comment.status,
                "Location": comment.extensions.location if comment.extensions else None,
            }
            if rendered.highlighted_text:
                properties["Highlighted text"] = f"> {rendered.highlighted_text}"
            if comment.links.webui:
                properties["URL"] = {
                    "url": ensure_absolute_url(comment.links.webui, base_url),
                    "title": "View in Confluence",
                }
            lines.append(format_bullet_list(properties))
            lines.append("")
            lines.append(rendered.markdown_body)
            lines.append("")
        body = "\n".join(lines).strip()

    return f"{body}\n\n{format_footer()}\n\n{format_pagination(result.pagination)}"


def format_inline_comments_list(result: CommentListResult, base_url: Optional[str] = None) -> str:
    total = result.total_count or 0
    if total == 0:
        header = f"No inline comments found for page {result.page_id}."
        return f"{header}\n\n{format_footer()}"

    shown_from = result.start + 1 if result.comments else result.start
    shown_to = result.start + len(result.comments)
    header = (
        f"{format_heading(f'Inline Comments for Page {result.page_id}', 1)}\n\n"
        f"*Showing {shown_from}-{shown_to} of {total} inline comments.*"
    )
    listing = format_comments_list(result, base_url)
    # Drop the generic heading; the inline header replaces it
    listing = listing.split("\n", 1)[1].lstrip() if result.comments else listing
    return f"{header}\n\n{listing}"
