"""Tests for PageRequest / Page."""

import pytest

from inventory_kernel.domain.pagination import Page, PageRequest


class TestPageRequest:

    def test_offset(self):
        assert PageRequest(page=3, limit=10).offset == 20

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    def test_bounds(self, page, limit):
        with pytest.raises(ValueError):
            PageRequest(page=page, limit=limit)


class TestPage:

    def test_total_pages_rounds_up(self):
        page = Page(items=(), total=21, page=1, limit=10)

        assert page.total_pages == 3

    def test_empty_has_zero_pages(self):
        page = Page.empty(PageRequest(page=2, limit=5))

        assert page.total == 0
        assert page.total_pages == 0
        assert page.page == 2

    def test_slice_window(self):
        page = Page.slice(list(range(12)), PageRequest(page=2, limit=5))

        assert page.items == (5, 6, 7, 8, 9)
        assert page.total == 12
        assert page.total_pages == 3

    def test_slice_past_end(self):
        page = Page.slice([1, 2], PageRequest(page=4, limit=5))

        assert page.items == ()
        assert page.total == 2
