"""
Schemas - Comment Models

Pydantic models for page footer and inline comments (REST API v1).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from confluence_mcp.schemas.search import PaginationInfo, ResponseLinks


class InlineProperties(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    original_selection: Optional[str] = Field(default=None, alias="originalSelection")
    text_context: Optional[str] = Field(default=None, alias="textContext")
    selection_text: Optional[str] = Field(default=None, alias="selectionText")
    marker_ref: Optional[str] = Field(default=None, alias="markerRef")


class CommentExtensions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    location: Optional[str] = None
    inline_properties: Optional[InlineProperties] = Field(
        default=None, alias="inlineProperties"
    )


class StorageBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str = ""


class CommentBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    storage: Optional[StorageBody] = None


class CommentLinks(BaseModel):
    model_config = ConfigDict(extra="allow")

    webui: Optional[str] = None


class CommentRecord(BaseModel):
    """A comment attached to a page."""
    model_config = ConfigDict(
        populate_by_name=True, extra="allow", coerce_numbers_to_str=True
    )

    id: str
    status: str = "current"
    title: str = ""
    body: Optional[CommentBody] = None
    extensions: Optional[CommentExtensions] = None
    links: CommentLinks = Field(default_factory=CommentLinks, alias="_links")

    @property
    def is_inline(self) -> bool:
        return bool(self.extensions and self.extensions.location == "inline")

    @property
    def highlighted_text(self) -> Optional[str]:
        """Text the inline comment was anchored to, when Confluence reports it."""
        if not self.extensions or not self.extensions.inline_properties:
            return None
        props = self.extensions.inline_properties
        return props.original_selection or props.text_context or props.selection_text


class CommentsResponse(BaseModel):
    """Validated ``/rest/api/content/{id}/child/comment`` payload."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    results: List[CommentRecord] = []
    start: Optional[int] = None
    limit: Optional[int] = None
    size: Optional[int] = None
    links: ResponseLinks = Field(default_factory=ResponseLinks, alias="_links")


class RenderedComment(BaseModel):
    """A comment with its body converted to Markdown."""
    comment: CommentRecord
    markdown_body: str
    highlighted_text: Optional[str] = None


class CommentListResult(BaseModel):
    page_id: str
    comments: List[RenderedComment] = []
    pagination: PaginationInfo
    total_count: Optional[int] = None
    start: int = 0
    limit: int
