"""
Confluence MCP Server - Configuration

Pydantic Settings for all configuration via environment variables.
"""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional, Literal


class ConfluenceSettings(BaseSettings):
    """Confluence API configuration."""
    base_url: str = Field(..., alias="CONFLUENCE_BASE_URL")
    username: Optional[str] = Field(None, alias="CONFLUENCE_USERNAME")
    api_token: Optional[str] = Field(None, alias="CONFLUENCE_API_TOKEN")
    timeout_seconds: float = Field(30.0, alias="CONFLUENCE_TIMEOUT_SECONDS")

    model_config = {"env_prefix": "", "extra": "ignore"}


class SearchSettings(BaseSettings):
    """Query sizing limits shared by the search, listing and comment services."""
    default_page_size: int = Field(25, alias="SEARCH_DEFAULT_PAGE_SIZE")
    max_limit: int = Field(100, alias="SEARCH_MAX_LIMIT")
    default_limit_per_type: int = Field(5, alias="SEARCH_DEFAULT_LIMIT_PER_TYPE")
    max_limit_per_type: int = Field(25, alias="SEARCH_MAX_LIMIT_PER_TYPE")
    fallback_limit: int = Field(25, alias="SEARCH_FALLBACK_LIMIT")
    space_lookup_batch: int = Field(100, alias="SEARCH_SPACE_LOOKUP_BATCH")
    inline_comment_fetch_limit: int = Field(
        250, alias="SEARCH_INLINE_COMMENT_FETCH_LIMIT"
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class MCPSettings(BaseSettings):
    """MCP server configuration."""
    transport: Literal["sse", "stdio"] = Field("stdio", alias="MCP_TRANSPORT")
    port: int = Field(8080, alias="MCP_PORT")
    host: str = Field("0.0.0.0", alias="MCP_HOST")

    model_config = {"env_prefix": "", "extra": "ignore"}


class LogSettings(BaseSettings):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", alias="LOG_LEVEL"
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""
    confluence: ConfluenceSettings = Field(default_factory=ConfluenceSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    mcp: MCPSettings = Field(default_factory=MCPSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = {"env_prefix": "", "extra": "ignore"}


def get_settings() -> Settings:
    """Load settings from environment variables."""
    from dotenv import load_dotenv
    load_dotenv()
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from the LOG_LEVEL setting."""
    level = settings.log.level if settings else "INFO"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
