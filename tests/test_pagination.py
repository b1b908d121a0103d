"""
Unit Tests for pagination normalization
"""

import copy

from confluence_mcp.services.pagination import (
    PaginationType,
    extract_cursor,
    extract_pagination_info,
    with_next_offset,
)


class TestCursorPagination:
    """Tests for cursor-linked pages."""

    def test_next_link_means_more(self):
        raw = {
            "results": [{"id": "1"}],
            "_links": {"next": "/rest/api/search?cql=type%3Dpage&limit=1&cursor=abc%3D%3D&next=true"},
        }

        info = extract_pagination_info(raw, PaginationType.CURSOR)

        assert info.count == 1
        assert info.has_more is True
        assert info.next_cursor == "abc%3D%3D"
        assert info.next_offset is None

    def test_no_next_link_is_terminal_even_when_full(self):
        raw = {"results": [{"id": str(i)} for i in range(25)], "_links": {"base": "x"}}

        info = extract_pagination_info(raw, PaginationType.CURSOR, requested_limit=25)

        assert info.count == 25
        assert info.has_more is False
        assert info.next_cursor is None

    def test_link_without_cursor_param_is_kept_whole(self):
        assert extract_cursor("/api/v2/pages?token=xyz") == "/api/v2/pages?token=xyz"

    def test_input_not_mutated(self):
        raw = {"results": [{"id": "1"}], "_links": {"next": "/x?cursor=c1"}}
        snapshot = copy.deepcopy(raw)

        extract_pagination_info(raw, PaginationType.CURSOR)

        assert raw == snapshot


class TestOffsetPagination:
    """Tests for offset-counted pages."""

    def test_full_page_means_more(self):
        raw = {"results": [{"id": str(i)} for i in range(10)], "start": 0, "size": 10}

        info = extract_pagination_info(raw, PaginationType.OFFSET, requested_limit=10)

        assert info.count == 10
        assert info.has_more is True
        assert info.next_offset is None

    def test_short_page_is_terminal(self):
        raw = {"results": [{"id": "1"}, {"id": "2"}, {"id": "3"}]}

        info = extract_pagination_info(raw, PaginationType.OFFSET, requested_limit=10)

        assert info.count == 3
        assert info.has_more is False

    def test_explicit_more_flag(self):
        raw = {"results": [{"id": "1"}], "hasMore": True}

        info = extract_pagination_info(raw, PaginationType.OFFSET, requested_limit=10)

        assert info.has_more is True

    def test_limit_falls_back_to_payload(self):
        raw = {"results": [{"id": "1"}, {"id": "2"}], "limit": 2}

        assert extract_pagination_info(raw, PaginationType.OFFSET).has_more is True

    def test_empty_page(self):
        info = extract_pagination_info({"results": []}, PaginationType.OFFSET, requested_limit=0)

        assert info.count == 0
        assert info.has_more is False

    def test_caller_adds_next_offset(self):
        raw = {"results": [{"id": str(i)} for i in range(5)]}
        info = extract_pagination_info(raw, PaginationType.OFFSET, requested_limit=5)

        assert with_next_offset(info, start=20).next_offset == 25
        assert info.next_offset is None

    def test_next_offset_not_set_on_last_page(self):
        info = extract_pagination_info({"results": [{}]}, PaginationType.OFFSET, requested_limit=5)

        assert with_next_offset(info, start=20).next_offset is None
