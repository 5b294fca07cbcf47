"""
Canvas Service – the drawing capability the layout engine draws onto.

The engine never emits PDF operators itself; it talks to a :class:`Canvas`
(one open page) obtained from a :class:`Document` (the canvas factory).
:class:`ReportLabDocument` is the production implementation on top of
``reportlab.pdfgen.canvas``. Pages are buffered until :meth:`save` so that
page decorators (watermarks, "Page X of Y") run once the page total is
known.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from reportlab.graphics import renderPDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas as rl_canvas

from report_engine.exceptions import LayoutError
from report_engine.models.styles import FontStyle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Font:
    name: str
    size: float


@dataclass(frozen=True)
class FontFamily:
    """Registered font names for the four styles of one family."""

    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"
    bold_italic: str = "Helvetica-BoldOblique"

    def font(self, style: FontStyle, size: float) -> Font:
        name = {
            FontStyle.NORMAL: self.regular,
            FontStyle.BOLD: self.bold,
            FontStyle.ITALIC: self.italic,
            FontStyle.BOLD_ITALIC: self.bold_italic,
        }[style]
        return Font(name, size)

    @classmethod
    def from_directory(cls, directory: Path | str, family: str = "NotoSans") -> FontFamily:
        """
        Register ``<family>-Regular/Bold/Italic/BoldItalic.ttf`` from
        *directory* with reportlab and return the matching family.
        """
        directory = Path(directory)
        names = {}
        for attr, suffix in (
            ("regular", "Regular"),
            ("bold", "Bold"),
            ("italic", "Italic"),
            ("bold_italic", "BoldItalic"),
        ):
            name = f"{family}-{suffix}"
            path = directory / f"{name}.ttf"
            if name not in pdfmetrics.getRegisteredFontNames():
                try:
                    pdfmetrics.registerFont(TTFont(name, str(path)))
                except Exception as exc:
                    raise LayoutError(f"Font not found or unreadable: {path}") from exc
            names[attr] = name
        logger.info("Registered font family %s from %s", family, directory)
        return cls(**names)


# ---------------------------------------------------------------------------
# Capability protocols
# ---------------------------------------------------------------------------

class Canvas(Protocol):
    """Drawing surface of one open page. Rectangles are (x, y) bottom-left."""

    width: float
    height: float

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        font: Font,
        color: str,
        *,
        rotation: float = 0.0,
        opacity: float = 1.0,
    ) -> None: ...

    def measure_text(self, text: str, font: Font) -> float: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None: ...

    def stroke_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: str,
        thickness: float,
        dash: Optional[Sequence[float]] = None,
    ) -> None: ...

    def stroke_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: str,
        thickness: float,
        dash: Optional[Sequence[float]] = None,
    ) -> None: ...

    def draw_image(
        self,
        data: bytes,
        x: float,
        y: float,
        width: float,
        height: float,
        opacity: float = 1.0,
    ) -> None: ...

    def image_size(self, data: bytes) -> tuple[float, float]: ...

    def draw_graphic(self, drawing, x: float, y: float, opacity: float = 1.0) -> None: ...

    def close(self) -> None: ...


PageDecorator = Callable[[Canvas, int, int], None]


class Document(Protocol):
    """Canvas factory: hands out one page canvas at a time."""

    def open_page(self, width: float, height: float) -> Canvas: ...

    def add_page_decorator(self, decorator: PageDecorator) -> None: ...

    def save(self) -> bytes: ...


# ---------------------------------------------------------------------------
# reportlab implementation
# ---------------------------------------------------------------------------

class _DeferredPageCanvas(rl_canvas.Canvas):
    """reportlab canvas that keeps finished pages until :meth:`finish`."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.saved_pages: list[dict] = []

    def showPage(self):
        self.saved_pages.append(dict(self.__dict__))
        self._startPage()

    def finish(self, decorate: Callable[[int, int], None]) -> None:
        total = len(self.saved_pages)
        for number, state in enumerate(self.saved_pages, start=1):
            self.__dict__.update(state)
            decorate(number, total)
            rl_canvas.Canvas.showPage(self)
        rl_canvas.Canvas.save(self)


class ReportLabCanvas:
    """:class:`Canvas` bound to the current page of a reportlab canvas."""

    def __init__(
        self,
        target: rl_canvas.Canvas,
        width: float,
        height: float,
        on_close: Callable[[], None] | None = None,
    ):
        self._c = target
        self.width = width
        self.height = height
        self._on_close = on_close
        self.closed = False

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def draw_text(self, x, y, text, font, color, *, rotation=0.0, opacity=1.0):
        self._ensure_open()
        c = self._c
        c.saveState()
        c.setFillColor(colors.toColor(color))
        if opacity < 1.0:
            c.setFillAlpha(opacity)
        c.setFont(font.name, font.size)
        if rotation:
            c.translate(x, y)
            c.rotate(rotation)
            c.drawString(0, 0, text)
        else:
            c.drawString(x, y, text)
        c.restoreState()

    def measure_text(self, text, font):
        return pdfmetrics.stringWidth(text, font.name, font.size)

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def fill_rect(self, x, y, width, height, color):
        self._ensure_open()
        c = self._c
        c.saveState()
        c.setFillColor(colors.toColor(color))
        c.rect(x, y, width, height, stroke=0, fill=1)
        c.restoreState()

    def stroke_rect(self, x, y, width, height, color, thickness, dash=None):
        self._ensure_open()
        c = self._c
        c.saveState()
        self._apply_stroke(color, thickness, dash)
        c.rect(x, y, width, height, stroke=1, fill=0)
        c.restoreState()

    def stroke_line(self, x1, y1, x2, y2, color, thickness, dash=None):
        self._ensure_open()
        c = self._c
        c.saveState()
        self._apply_stroke(color, thickness, dash)
        c.line(x1, y1, x2, y2)
        c.restoreState()

    def _apply_stroke(self, color, thickness, dash) -> None:
        self._c.setStrokeColor(colors.toColor(color))
        self._c.setLineWidth(thickness)
        if dash:
            self._c.setDash(list(dash), 0)

    # ------------------------------------------------------------------
    # Images / graphics
    # ------------------------------------------------------------------

    def draw_image(self, data, x, y, width, height, opacity=1.0):
        self._ensure_open()
        c = self._c
        c.saveState()
        if opacity < 1.0:
            c.setFillAlpha(opacity)
        c.drawImage(ImageReader(io.BytesIO(data)), x, y, width, height, mask="auto")
        c.restoreState()

    def image_size(self, data):
        width, height = ImageReader(io.BytesIO(data)).getSize()
        return float(width), float(height)

    def draw_graphic(self, drawing, x, y, opacity=1.0):
        self._ensure_open()
        c = self._c
        c.saveState()
        if opacity < 1.0:
            c.setFillAlpha(opacity)
            c.setStrokeAlpha(opacity)
        renderPDF.draw(drawing, c, x, y)
        c.restoreState()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close()

    def _ensure_open(self) -> None:
        if self.closed:
            raise LayoutError("Drawing on a closed page", operation="draw")


class ReportLabDocument:
    """:class:`Document` producing PDF bytes with reportlab."""

    def __init__(self, title: str | None = None, author: str | None = None):
        self._buffer = io.BytesIO()
        self._canvas = _DeferredPageCanvas(self._buffer, pagesize=LETTER)
        if title:
            self._canvas.setTitle(title)
        if author:
            self._canvas.setAuthor(author)
        self._decorators: list[PageDecorator] = []
        self._page: ReportLabCanvas | None = None
        self._saved = False

    @property
    def page_count(self) -> int:
        open_page = 1 if self._page is not None and not self._page.closed else 0
        return len(self._canvas.saved_pages) + open_page

    def open_page(self, width: float, height: float) -> ReportLabCanvas:
        if self._saved:
            raise LayoutError("Document already saved", operation="open_page")
        if self._page is not None and not self._page.closed:
            raise LayoutError("Previous page is still open", operation="open_page")
        self._canvas.setPageSize((width, height))
        self._page = ReportLabCanvas(self._canvas, width, height, on_close=self._canvas.showPage)
        return self._page

    def add_page_decorator(self, decorator: PageDecorator) -> None:
        self._decorators.append(decorator)

    def save(self) -> bytes:
        if self._page is not None and not self._page.closed:
            raise LayoutError("Cannot save while a page is still open", operation="save")
        if not self._saved:
            self._canvas.finish(self._decorate)
            self._saved = True
            logger.info("PDF document finalised (%d pages)", len(self._canvas.saved_pages))
        return self._buffer.getvalue()

    def _decorate(self, page_number: int, total: int) -> None:
        width, height = self._canvas._pagesize
        page = ReportLabCanvas(self._canvas, width, height)
        for decorator in self._decorators:
            decorator(page, page_number, total)
