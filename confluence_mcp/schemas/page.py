"""
Schemas - Page Models

Pydantic models for Confluence page listings (REST API v2).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

from confluence_mcp.schemas.search import PaginationInfo, ResponseLinks


PageStatus = Literal["current", "archived", "trashed", "deleted", "draft", "historical"]


class PageVersion(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    number: int
    author_id: str = Field(default="", alias="authorId")
    message: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class PageLinks(BaseModel):
    model_config = ConfigDict(extra="allow")

    webui: str = ""
    editui: str = ""
    tinyui: str = ""


class PageRecord(BaseModel):
    """Canonical page record as returned by ``/api/v2/pages``."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    status: str = "current"
    title: str = ""
    space_id: str = Field(default="", alias="spaceId")
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    parent_type: Optional[str] = Field(default=None, alias="parentType")
    position: Optional[int] = None
    author_id: str = Field(default="", alias="authorId")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    version: Optional[PageVersion] = None
    links: PageLinks = Field(default_factory=PageLinks, alias="_links")


class PagesResponse(BaseModel):
    """Validated ``/api/v2/pages`` payload."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    results: List[PageRecord] = []
    links: ResponseLinks = Field(default_factory=ResponseLinks, alias="_links")


class ListPagesOptions(BaseModel):
    """Filters accepted when listing pages."""
    space_ids: Optional[List[str]] = None
    space_keys: Optional[List[str]] = None
    title: Optional[str] = None
    status: Optional[List[PageStatus]] = None
    parent_id: Optional[str] = None
    sort: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)
    cursor: Optional[str] = None


class PageListResult(BaseModel):
    """A page of listed pages plus how it was obtained."""
    pages: PagesResponse
    pagination: PaginationInfo
    partial_match: bool = False
