"""
Decoration Service – watermarks and page numbers.

Both are page decorators: callables registered on the document and run
for every page when it is saved, once the page total is known.
"""

from __future__ import annotations

import logging

from report_engine.exceptions import LayoutError
from report_engine.models.styles import FontStyle, WatermarkPosition, WatermarkStyle, WatermarkType
from report_engine.services.canvas_service import Canvas, Document, FontFamily

logger = logging.getLogger(__name__)

EDGE_OFFSET = 50.0
PAGE_NUMBER_FORMAT = "Page {page} of {total}"
SIMPLE_PAGE_NUMBER_FORMAT = "{page}"


class WatermarkDecorator:
    """Draws one :class:`WatermarkStyle` on every page."""

    def __init__(self, style: WatermarkStyle, fonts: FontFamily | None = None):
        if style.watermark_type is WatermarkType.IMAGE and not style.image:
            raise LayoutError("Image watermark without image data", operation="watermark")
        self.style = style
        self.fonts = fonts or FontFamily()

    def __call__(self, canvas: Canvas, page_number: int, total_pages: int) -> None:
        if self.style.watermark_type is WatermarkType.IMAGE:
            self._draw_image(canvas)
        else:
            self._draw_text(canvas)

    def _draw_text(self, canvas: Canvas) -> None:
        style = self.style
        font = self.fonts.font(style.font_style, style.font_size)
        text_width = canvas.measure_text(style.text, font)
        centered_x = (canvas.width - text_width) / 2

        def put(x: float, y: float, rotation: float = 0.0) -> None:
            canvas.draw_text(x, y, style.text, font, style.color,
                             rotation=rotation, opacity=style.opacity)

        position = style.position
        if position is WatermarkPosition.DIAGONAL:
            put(centered_x, canvas.height / 2, style.rotation)
        elif position is WatermarkPosition.CENTER:
            put(centered_x, canvas.height / 2)
        elif position is WatermarkPosition.TOP:
            put(centered_x, canvas.height - EDGE_OFFSET)
        elif position is WatermarkPosition.BOTTOM:
            put(centered_x, EDGE_OFFSET)
        elif position is WatermarkPosition.TILED:
            y = EDGE_OFFSET
            while y < canvas.height:
                x = EDGE_OFFSET
                while x < canvas.width:
                    put(x, y, style.rotation)
                    x += style.tile_spacing_x
                y += style.tile_spacing_y

    def _draw_image(self, canvas: Canvas) -> None:
        data = self.style.image
        width, height = canvas.image_size(data)
        canvas.draw_image(
            data,
            (canvas.width - width) / 2,
            (canvas.height - height) / 2,
            width,
            height,
            opacity=self.style.opacity,
        )


class PageNumberDecorator:
    """Right-aligned page number near the bottom-right corner."""

    def __init__(
        self,
        fmt: str = PAGE_NUMBER_FORMAT,
        margin_right: float = 50.0,
        margin_bottom: float = 30.0,
        font_size: float = 9.0,
        font_style: FontStyle = FontStyle.NORMAL,
        color: str = "#404040",
        fonts: FontFamily | None = None,
    ):
        self.fmt = fmt
        self.margin_right = margin_right
        self.margin_bottom = margin_bottom
        self.font = (fonts or FontFamily()).font(font_style, font_size)
        self.color = color

    def label(self, page_number: int, total_pages: int) -> str:
        return self.fmt.format(page=page_number, total=total_pages)

    def __call__(self, canvas: Canvas, page_number: int, total_pages: int) -> None:
        text = self.label(page_number, total_pages)
        x = canvas.width - self.margin_right - canvas.measure_text(text, self.font)
        canvas.draw_text(x, self.margin_bottom, text, self.font, self.color)


class DecorationService:
    """Registers watermark and page-number decorators on a document."""

    def __init__(self, fonts: FontFamily | None = None):
        self.fonts = fonts or FontFamily()

    def add_watermark(self, document: Document, style: WatermarkStyle | None = None) -> WatermarkDecorator:
        decorator = WatermarkDecorator(style or WatermarkStyle.confidential(), self.fonts)
        document.add_page_decorator(decorator)
        logger.debug("Watermark %r registered", decorator.style.text)
        return decorator

    def add_page_numbers(
        self,
        document: Document,
        fmt: str = PAGE_NUMBER_FORMAT,
        margin_right: float = 50.0,
        margin_bottom: float = 30.0,
        font_size: float = 9.0,
        font_style: FontStyle = FontStyle.NORMAL,
    ) -> PageNumberDecorator:
        decorator = PageNumberDecorator(
            fmt, margin_right, margin_bottom, font_size, font_style, fonts=self.fonts
        )
        document.add_page_decorator(decorator)
        return decorator

    def add_simple_page_numbers(self, document: Document, **kwargs) -> PageNumberDecorator:
        return self.add_page_numbers(document, SIMPLE_PAGE_NUMBER_FORMAT, **kwargs)
