"""
Tests for Paginator — space checks, page breaks, cursor and lifecycle.
"""

import logging

import pytest

from report_engine.exceptions import LayoutError, PaginatorClosedError, ResourceReleaseError
from report_engine.models.geometry import PageGeometry
from report_engine.services.paginator import Paginator


class TestConstruction:
    def test_starts_on_first_page(self, paginator, document):
        assert paginator.page_count == 1
        assert paginator.page_index == 0
        assert paginator.current_y == 742
        assert len(document.pages) == 1
        assert document.pages[0].width == 612

    def test_landscape_pages(self, document):
        with Paginator(PageGeometry.letter_landscape(), document) as p:
            assert p.current_y == 562
        assert (document.pages[0].width, document.pages[0].height) == (792, 612)

    def test_requires_document(self, geometry):
        with pytest.raises(LayoutError):
            Paginator(geometry, None)


class TestSpaceChecks:
    def test_has_space_is_pure(self, paginator):
        assert paginator.has_space(692)
        assert not paginator.has_space(693)
        assert paginator.page_count == 1
        assert paginator.current_y == 742

    def test_check_space_no_break(self, paginator):
        assert paginator.check_space(100) is False
        assert paginator.page_count == 1

    def test_check_space_breaks(self, paginator):
        paginator.advance_y(600)
        assert paginator.check_space(100) is True
        assert paginator.page_count == 2
        assert paginator.current_y == 742

    def test_check_space_boundary_fits_exactly(self, paginator):
        paginator.advance_y(600)
        # 142 - 92 == 50 == min_y
        assert paginator.check_space(92) is False

    def test_check_space_twice_breaks_at_most_once(self, paginator):
        paginator.advance_y(650)
        paginator.check_space(60)
        pages = paginator.page_count
        paginator.check_space(60)
        assert paginator.page_count == pages

    def test_oversized_request_does_not_loop(self, paginator, caplog):
        paginator.advance_y(10)
        with caplog.at_level(logging.WARNING):
            assert paginator.check_space(5000) is True
            assert paginator.check_space(5000) is False
        assert paginator.page_count == 2
        assert "exceeds the usable page height" in caplog.text

    def test_oversized_on_fresh_page_does_not_break(self, paginator):
        assert paginator.check_space(10_000) is False
        assert paginator.page_count == 1

    def test_fit_height(self, paginator):
        assert paginator.fit_height(100) == 100
        assert paginator.fit_height(900) == 692


class TestCursor:
    def test_add_space_within_page(self, paginator):
        assert paginator.add_space(40) is False
        assert paginator.current_y == 702
        assert paginator.page_count == 1

    def test_add_space_default(self, paginator):
        paginator.add_space()
        assert paginator.current_y == 722

    def test_add_space_overflow(self, paginator):
        paginator.advance_y(680)
        assert paginator.add_space(30) is True
        assert paginator.page_count == 2
        assert paginator.current_y == 742 - 30

    def test_negative_advance_rejected(self, paginator):
        with pytest.raises(ValueError):
            paginator.advance_y(-1)

    def test_advance_clamps_at_bottom(self, paginator):
        paginator.advance_y(1000)
        assert paginator.current_y == 50
        assert paginator.available_height == 0

    def test_available_height(self, paginator):
        paginator.advance_y(42)
        assert paginator.available_height == 650


class TestLifecycle:
    def test_new_page_closes_previous(self, paginator, document):
        paginator.new_page()
        assert document.pages[0].closed
        assert not document.pages[1].closed

    def test_close_is_idempotent(self, geometry, document):
        p = Paginator(geometry, document)
        p.close()
        p.close()
        assert p.closed
        assert document.pages[0].closed

    def test_use_after_close(self, geometry, document):
        p = Paginator(geometry, document)
        p.close()
        with pytest.raises(PaginatorClosedError):
            p.check_space(10)
        with pytest.raises(PaginatorClosedError):
            p.add_space()
        with pytest.raises(PaginatorClosedError):
            p.canvas

    def test_closed_error_is_runtime_error(self, geometry, document):
        p = Paginator(geometry, document)
        p.close()
        with pytest.raises(RuntimeError):
            p.new_page()

    def test_context_manager_releases_on_error(self, geometry, document):
        with pytest.raises(KeyError):
            with Paginator(geometry, document) as p:
                p.new_page()
                raise KeyError("boom")
        assert p.closed
        assert all(page.closed for page in document.pages)

    def test_release_failure_raises(self, geometry, document):
        p = Paginator(geometry, document)
        document.pages[0].fail_on_close = True
        with pytest.raises(ResourceReleaseError) as excinfo:
            p.close()
        assert excinfo.value.page_index == 0
        assert "page=1" in str(excinfo.value)

    def test_release_failure_does_not_mask_original_error(self, geometry, document):
        with pytest.raises(KeyError):
            with Paginator(geometry, document):
                document.pages[0].fail_on_close = True
                raise KeyError("original")
