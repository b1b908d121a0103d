"""
Services - CQL Builder

Safe construction of Confluence Query Language strings from structured filters.
"""

from typing import List, Optional, Sequence

from confluence_mcp.schemas.search import CATEGORY_TO_CQL_TYPE, FilterSet


def escape_cql_value(value: str) -> str:
    """
    Escape a value for use inside a double-quoted CQL literal.

    Only backslashes and double quotes are escaped. Escape raw user text
    exactly once per literal it is inserted into.

    Args:
        value: Raw string value

    Returns:
        Escaped string, without surrounding quotes
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def any_space_clause(space_keys: Sequence[str]) -> str:
    """Parenthesized OR-group matching any of ``space_keys``."""
    spaces = " OR ".join(f'space = "{escape_cql_value(key)}"' for key in space_keys)
    return f"({spaces})"


def build_cql_query(
    filters: FilterSet,
    space_keys: Optional[Sequence[str]] = None,
) -> str:
    """
    Build a CQL query from structured filters.

    Clauses are emitted in a fixed order (title, space, labels, content type,
    free text) and joined with AND. A raw ``cql`` override is ANDed with the
    generated clauses, or used alone when nothing else was given.

    Args:
        filters: Caller-supplied filters
        space_keys: Keys resolved from ``filters.space_ids``, matched as an
            OR-group after the ``space_key`` clause

    Returns:
        CQL string, or "" when no criteria were provided
    """
    clauses: List[str] = []

    if filters.title:
        clauses.append(f'title ~ "{escape_cql_value(filters.title)}"')
    if filters.space_key:
        clauses.append(f'space = "{escape_cql_value(filters.space_key)}"')
    if space_keys:
        clauses.append(any_space_clause(space_keys))
    for label in filters.labels or []:
        clauses.append(f'label = "{escape_cql_value(label)}"')
    if filters.content_type:
        clauses.append(f"type = {filters.content_type}")
    if filters.query:
        clauses.append(f'text ~ "{escape_cql_value(filters.query)}"')

    generated = " AND ".join(clauses)
    raw = filters.cql.strip() if filters.cql else ""

    if raw:
        if generated:
            return f"({generated}) AND ({raw})"
        return raw
    return generated


def build_category_cql(
    category: str,
    query: str,
    space_key: Optional[str] = None,
    labels: Optional[Sequence[str]] = None,
) -> str:
    """
    Build the CQL for one universal search category.

    The type clause always comes first. Space filtering does not apply to the
    ``spaces`` category, and labels only apply to pages and blog posts.
    """
    clauses = [
        f"type = {CATEGORY_TO_CQL_TYPE[category]}",
        f'text ~ "{escape_cql_value(query)}"',
    ]

    if space_key and category != "spaces":
        clauses.append(f'space = "{escape_cql_value(space_key)}"')

    if labels and category in ("pages", "blog_posts"):
        for label in labels:
            clauses.append(f'label = "{escape_cql_value(label)}"')

    return " AND ".join(clauses)


def build_partial_title_cql(
    title: str,
    space_keys: Optional[Sequence[str]] = None,
    content_type: str = "page",
) -> str:
    """Wildcard title match used when an exact title lookup finds nothing."""
    clauses = [f'title ~ "{escape_cql_value(title)}*"']

    if space_keys:
        clauses.append(any_space_clause(space_keys))

    clauses.append(f'type = "{content_type}"')
    return " AND ".join(clauses)
