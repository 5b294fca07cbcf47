"""
Paginator – owns the current page, the vertical cursor and the page count.

Content is placed top-down: the cursor starts at ``geometry.start_y()``
and decreases as content is drawn. Before anything whose height is known
is placed, callers run :meth:`Paginator.check_space`; when the content
would cross the bottom margin a new page is opened and the cursor reset.
"""

from __future__ import annotations

import logging

from report_engine.exceptions import LayoutError, PaginatorClosedError, ResourceReleaseError
from report_engine.models.geometry import PageGeometry
from report_engine.services.canvas_service import Canvas, Document

logger = logging.getLogger(__name__)

DEFAULT_SPACE = 20.0


class Paginator:
    """
    Two states: active (one open page canvas) and closed (terminal).

    Use it as a context manager so the last page is released even when
    content generation raises::

        with Paginator(geometry, document) as paginator:
            ...
    """

    def __init__(self, geometry: PageGeometry, document: Document):
        if document is None:
            raise LayoutError("A document is required", operation="init")
        geometry.validate()
        self._geometry = geometry
        self._document = document
        self._canvas: Canvas | None = None
        self._current_y = geometry.start_y()
        self._page_count = 0
        self._closed = False
        self.new_page()

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> Paginator:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except ResourceReleaseError:
            if exc_type is None:
                raise
            # the in-flight exception wins; the release failure is only logged
            logger.exception("Page release failed while handling %s", exc_type.__name__)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def geometry(self) -> PageGeometry:
        return self._geometry

    @property
    def document(self) -> Document:
        return self._document

    @property
    def canvas(self) -> Canvas:
        self._ensure_open("canvas")
        return self._canvas

    @property
    def current_y(self) -> float:
        return self._current_y

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def page_index(self) -> int:
        """0-based index of the current page."""
        return self._page_count - 1

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def start_x(self) -> float:
        return self._geometry.start_x()

    @property
    def usable_width(self) -> float:
        return self._geometry.usable_width()

    @property
    def usable_height(self) -> float:
        return self._geometry.usable_height()

    @property
    def available_height(self) -> float:
        """Vertical space left between the cursor and the bottom margin."""
        return self._current_y - self._geometry.min_y()

    @property
    def at_page_top(self) -> bool:
        return self._current_y >= self._geometry.start_y()

    # ------------------------------------------------------------------
    # Page management
    # ------------------------------------------------------------------

    def new_page(self) -> None:
        """Release the open page, open a fresh one and reset the cursor."""
        self._ensure_open("new_page")
        self._release_canvas()
        width, height = self._geometry.effective_size()
        try:
            self._canvas = self._document.open_page(width, height)
        except LayoutError:
            raise
        except Exception as exc:
            raise LayoutError(
                "Could not open a new page",
                page_index=self._page_count,
                operation="new_page",
            ) from exc
        self._current_y = self._geometry.start_y()
        self._page_count += 1
        logger.debug("Opened page %d", self._page_count)

    def fit_height(self, required_height: float) -> float:
        """Clip *required_height* to one page; taller content is degraded, not looped on."""
        usable = self._geometry.usable_height()
        if required_height > usable:
            logger.warning(
                "Requested %.1fpt exceeds the usable page height %.1fpt on page %d; clipping",
                required_height,
                usable,
                self._page_count,
            )
            return usable
        return required_height

    def has_space(self, required_height: float) -> bool:
        """True when *required_height* fits above the bottom margin. No side effects."""
        self._ensure_open("has_space")
        return self._current_y - required_height >= self._geometry.min_y()

    def check_space(self, required_height: float) -> bool:
        """
        Start a new page when *required_height* does not fit.

        Returns True when a page break occurred. Requests taller than a whole
        page are clipped to the usable height first, so they break at most
        once (and not at all on a fresh page).
        """
        self._ensure_open("check_space")
        required_height = self.fit_height(required_height)
        if self._current_y - required_height < self._geometry.min_y():
            logger.debug(
                "Page break after page %d (needed %.1fpt, had %.1fpt)",
                self._page_count,
                required_height,
                self.available_height,
            )
            self.new_page()
            return True
        return False

    def advance_y(self, amount: float) -> None:
        """Move the cursor down by *amount* after drawing."""
        self._ensure_open("advance_y")
        if amount < 0:
            raise ValueError(f"Cannot advance by a negative amount ({amount})")
        self._current_y -= amount
        min_y = self._geometry.min_y()
        if self._current_y < min_y:
            logger.warning(
                "Cursor moved %.1fpt past the bottom margin on page %d; clamping",
                min_y - self._current_y,
                self._page_count,
            )
            self._current_y = min_y

    def add_space(self, amount: float = DEFAULT_SPACE) -> bool:
        """Blank vertical gap; may itself trigger a page break. Returns whether it did."""
        amount = self.fit_height(amount)
        broke = self.check_space(amount)
        self.advance_y(amount)
        return broke

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the open page. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._release_canvas()

    def _release_canvas(self) -> None:
        if self._canvas is None:
            return
        canvas, self._canvas = self._canvas, None
        try:
            canvas.close()
        except Exception as exc:
            raise ResourceReleaseError(
                "Could not release the page drawing context",
                page_index=self.page_index,
                operation="close",
            ) from exc

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise PaginatorClosedError(
                "Paginator is closed",
                page_index=self.page_index,
                operation=operation,
            )
