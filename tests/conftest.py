"""
Shared fixtures: explicit settings and a fake Confluence client.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from confluence_mcp.config import ConfluenceSettings, Settings


BASE_URL = "https://acme.atlassian.net/wiki"


@pytest.fixture
def settings():
    return Settings(
        confluence=ConfluenceSettings(
            CONFLUENCE_BASE_URL=BASE_URL,
            CONFLUENCE_USERNAME="bot@acme.test",
            CONFLUENCE_API_TOKEN="secret",
        ),
    )


@pytest.fixture
def client():
    """Stand-in for ConfluenceClient with every remote call mocked."""
    fake = MagicMock()
    fake.search = AsyncMock(return_value={"results": [], "_links": {}})
    fake.list_pages = AsyncMock(return_value={"results": [], "_links": {}})
    fake.list_spaces = AsyncMock(return_value={"results": []})
    fake.list_page_comments = AsyncMock(return_value={"results": [], "_links": {}})
    return fake


def search_hit(content_id, title, content_type="page", **extra):
    """Build a raw /rest/api/search hit."""
    hit = {
        "content": {
            "id": content_id,
            "type": content_type,
            "status": "current",
            "title": title,
            "_links": {"webui": f"/spaces/DEV/pages/{content_id}"},
        },
        "title": title,
        "excerpt": f"@@@hl@@@{title}@@@endhl@@@ excerpt",
        "url": f"/spaces/DEV/pages/{content_id}",
        "entityType": "content",
        "lastModified": "2024-03-01T10:00:00.000Z",
    }
    hit.update(extra)
    return hit
