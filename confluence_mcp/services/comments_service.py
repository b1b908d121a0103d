"""
Services - Comments Service

Page comment listing with offset pagination, and inline comment listing
filtered, sorted and paginated on the client side.
"""

import logging
from typing import List, Literal, Optional

from confluence_mcp.client import ConfluenceClient
from confluence_mcp.config import get_settings
from confluence_mcp.schemas.comment import (
    CommentListResult,
    CommentRecord,
    CommentsResponse,
    RenderedComment,
)
from confluence_mcp.services.formatter import storage_to_markdown
from confluence_mcp.services.pagination import (
    PaginationType,
    extract_pagination_info,
    with_next_offset,
)

logger = logging.getLogger(__name__)

UNSUPPORTED_BODY = "*Content format not supported or unavailable*"


class CommentsService:
    """Fetches page comments and converts their bodies to Markdown."""

    def __init__(self, settings=None, client=None):
        self.settings = settings or get_settings()
        self.client = client or ConfluenceClient(self.settings)

    async def list_page_comments(
        self,
        page_id: str,
        limit: Optional[int] = None,
        start: int = 0,
    ) -> CommentListResult:
        """
        List all comments on a page.

        Args:
            page_id: Confluence page ID
            limit: Page size (default from settings)
            start: Offset of the first comment

        Returns:
            CommentListResult with offset pagination

        Raises:
            ValueError: If limit or start is out of range
        """
        page_size = self._page_size(limit, start)
        logger.debug(f"Listing page comments for {page_id} (start={start}, limit={page_size})")

        raw = await self.client.list_page_comments(page_id, start=start, limit=page_size)
        response = CommentsResponse.model_validate(raw)

        pagination = extract_pagination_info(
            raw, PaginationType.OFFSET, requested_limit=page_size
        )

        return CommentListResult(
            page_id=page_id,
            comments=[self._render(comment) for comment in response.results],
            pagination=with_next_offset(pagination, start),
            start=start,
            limit=page_size,
        )

    async def list_inline_comments(
        self,
        page_id: str,
        include_resolved: bool = False,
        sort_by: Literal["created", "position"] = "position",
        limit: Optional[int] = None,
        start: int = 0,
    ) -> CommentListResult:
        """
        List only the inline comments on a page.

        Confluence has no server-side inline filter, so one large batch is
        fetched from offset 0 and filtering, sorting and paging happen here.

        Args:
            page_id: Confluence page ID
            include_resolved: Keep comments whose status is not ``current``
            sort_by: ``position`` (marker order) or ``created`` (id order)
            limit: Page size (default from settings)
            start: Offset into the filtered list

        Returns:
            CommentListResult with offset pagination over the filtered list

        Raises:
            ValueError: If limit or start is out of range
        """
        page_size = self._page_size(limit, start)

        raw = await self.client.list_page_comments(
            page_id,
            start=0,
            limit=self.settings.search.inline_comment_fetch_limit,
        )
        response = CommentsResponse.model_validate(raw)

        inline = [
            comment for comment in response.results
            if comment.is_inline and (include_resolved or comment.status == "current")
        ]
        logger.debug(
            f"Filtered {len(inline)} inline comments out of {len(response.results)}"
        )

        inline = self._sort(inline, sort_by)
        window = inline[start:start + page_size]

        pagination = extract_pagination_info(
            {"results": window, "hasMore": start + page_size < len(inline)},
            PaginationType.OFFSET,
            requested_limit=page_size,
        )

        return CommentListResult(
            page_id=page_id,
            comments=[self._render(comment) for comment in window],
            pagination=with_next_offset(pagination, start),
            total_count=len(inline),
            start=start,
            limit=page_size,
        )

    def _page_size(self, limit: Optional[int], start: int) -> int:
        search_settings = self.settings.search
        page_size = limit if limit is not None else search_settings.default_page_size
        if page_size < 1 or page_size > search_settings.max_limit:
            raise ValueError(
                f"Invalid limit {page_size}: must be between 1 and {search_settings.max_limit}."
            )
        if start < 0:
            raise ValueError(f"Invalid start {start}: must be 0 or greater.")
        return page_size

    @staticmethod
    def _sort(comments: List[CommentRecord], sort_by: str) -> List[CommentRecord]:
        if sort_by == "created":
            # Ids are assigned in creation order
            return sorted(comments, key=lambda c: (len(c.id), c.id))

        def position(comment: CommentRecord) -> str:
            props = comment.extensions.inline_properties if comment.extensions else None
            return str((props.marker_ref if props else None) or comment.id)

        return sorted(comments, key=position)

    def _render(self, comment: CommentRecord) -> RenderedComment:
        markdown = UNSUPPORTED_BODY
        if comment.body and comment.body.storage and comment.body.storage.value:
            markdown = storage_to_markdown(comment.body.storage.value)
        else:
            logger.warning(f"No storage body available for comment {comment.id}")

        highlighted = comment.highlighted_text if comment.is_inline else None
        if comment.is_inline and not highlighted:
            logger.warning(f"No highlighted text found for inline comment {comment.id}")

        return RenderedComment(
            comment=comment,
            markdown_body=markdown,
            highlighted_text=highlighted,
        )
