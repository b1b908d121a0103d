"""
Schemas - Search Models

Pydantic models for CQL filters, query descriptors, search hits and pagination.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional, Tuple


ContentType = Literal["page", "blogpost", "attachment", "comment", "space"]

SearchCategory = Literal["spaces", "pages", "blog_posts", "attachments", "comments"]

# Fixed iteration order for universal search
SEARCH_CATEGORIES: Tuple[SearchCategory, ...] = (
    "spaces",
    "pages",
    "blog_posts",
    "attachments",
    "comments",
)

CATEGORY_TO_CQL_TYPE: Dict[str, str] = {
    "spaces": "space",
    "pages": "page",
    "blog_posts": "blogpost",
    "attachments": "attachment",
    "comments": "comment",
}


class FilterSet(BaseModel):
    """Structured search intent supplied by a caller."""
    query: Optional[str] = None
    title: Optional[str] = None
    space_key: Optional[str] = None
    space_ids: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    content_type: Optional[ContentType] = None
    cql: Optional[str] = None


class QueryDescriptor(BaseModel):
    """A literal CQL string plus the execution parameters sent with it."""
    cql: str
    limit: int = Field(default=25, ge=1)
    cursor: Optional[str] = None
    start: Optional[int] = Field(default=None, ge=0)
    excerpt: Optional[str] = None
    include_archived_spaces: bool = False


class PaginationInfo(BaseModel):
    """Normalized pagination state for one page of results."""
    count: int
    has_more: bool
    next_cursor: Optional[str] = None
    next_offset: Optional[int] = None


class ResponseLinks(BaseModel):
    """The ``_links`` envelope Confluence attaches to list responses."""
    model_config = ConfigDict(extra="allow")

    next: Optional[str] = None
    base: Optional[str] = None


class SearchContentLinks(BaseModel):
    model_config = ConfigDict(extra="allow")

    webui: Optional[str] = None


class SearchContent(BaseModel):
    """The ``content`` object embedded in a search hit."""
    model_config = ConfigDict(
        populate_by_name=True, extra="allow", coerce_numbers_to_str=True
    )

    id: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    title: Optional[str] = None
    links: SearchContentLinks = Field(
        default_factory=SearchContentLinks, alias="_links"
    )


class SearchSpace(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    key: Optional[str] = None
    name: Optional[str] = None


class SearchContainer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: Optional[str] = None
    display_url: Optional[str] = Field(default=None, alias="displayUrl")


class SearchResultItem(BaseModel):
    """A single hit from ``/rest/api/search``.

    Search hits are thinner than the records returned by the list endpoints:
    they carry no authorship or version data.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    content: Optional[SearchContent] = None
    title: Optional[str] = None
    excerpt: Optional[str] = None
    url: Optional[str] = None
    entity_type: Optional[str] = Field(default=None, alias="entityType")
    space: Optional[SearchSpace] = None
    result_global_container: Optional[SearchContainer] = Field(
        default=None, alias="resultGlobalContainer"
    )
    last_modified: Optional[str] = Field(default=None, alias="lastModified")
    friendly_last_modified: Optional[str] = Field(
        default=None, alias="friendlyLastModified"
    )


class SearchResponse(BaseModel):
    """Validated ``/rest/api/search`` payload."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    results: List[SearchResultItem] = []
    start: Optional[int] = None
    limit: Optional[int] = None
    size: Optional[int] = None
    total_size: Optional[int] = Field(default=None, alias="totalSize")
    links: ResponseLinks = Field(default_factory=ResponseLinks, alias="_links")


class SearchOutcome(BaseModel):
    """Result of a direct CQL search, or an advisory when nothing ran."""
    cql: str = ""
    results: List[SearchResultItem] = []
    pagination: Optional[PaginationInfo] = None
    advisory: Optional[str] = None


class UniversalSearchResult(BaseModel):
    """Per-category results of a universal search, or an advisory."""
    query: str
    space_key: Optional[str] = None
    labels: Optional[List[str]] = None
    limit_per_type: int
    included_types: List[SearchCategory] = []
    results: Dict[str, List[SearchResultItem]] = Field(
        default_factory=lambda: {category: [] for category in SEARCH_CATEGORIES}
    )
    advisory: Optional[str] = None
