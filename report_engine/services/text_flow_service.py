"""
Text Flow Service – greedy word wrapping and aligned text boxes.

Heights are always computed from the wrapped lines *before* anything is
drawn, because the paginator's space check must precede drawing.
"""

from __future__ import annotations

import logging
from typing import Iterator

from report_engine.exceptions import layout_step
from report_engine.models.styles import TextAlign, TextStyle, VerticalAlign
from report_engine.services.canvas_service import Canvas, Font, FontFamily
from report_engine.services.paginator import Paginator

logger = logging.getLogger(__name__)


class TextFlowService:
    """Wraps strings into lines and writes them into boxes or across pages."""

    def __init__(self, fonts: FontFamily | None = None):
        self.fonts = fonts or FontFamily()

    def font_for(self, style: TextStyle) -> Font:
        return self.fonts.font(style.font_style, style.font_size)

    # ------------------------------------------------------------------
    # Wrapping
    # ------------------------------------------------------------------

    @staticmethod
    def wrap(canvas: Canvas, text: str | None, max_width: float, font: Font) -> Iterator[str]:
        """
        Lazily yield the lines of *text* wrapped at *max_width*.

        Each newline-separated paragraph is wrapped on its own. Words are
        joined by single spaces while the measured line stays ``<=
        max_width``; a word wider than the limit gets a line to itself.
        """
        if not text:
            return
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if not current or canvas.measure_text(candidate, font) <= max_width:
                    current = candidate
                else:
                    yield current
                    current = word
            if current:
                yield current

    def wrap_lines(self, canvas: Canvas, text: str | None, max_width: float, font: Font) -> list[str]:
        return list(self.wrap(canvas, text, max_width, font))

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    @staticmethod
    def text_height(line_count: int, style: TextStyle) -> float:
        return line_count * style.leading

    def box_height(
        self,
        canvas: Canvas,
        text: str | None,
        width: float,
        style: TextStyle,
        min_height: float = 0.0,
    ) -> float:
        """Height a box of *width* needs for *text*; 0 for empty text."""
        lines = self.wrap_lines(canvas, text, width - 2 * style.padding, self.font_for(style))
        if not lines:
            return 0.0
        return max(min_height, self.text_height(len(lines), style) + 2 * style.padding)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw_box(
        self,
        canvas: Canvas,
        text: str | None,
        x: float,
        y: float,
        width: float,
        height: float,
        style: TextStyle,
        clip: bool = False,
    ) -> float:
        """
        Draw *text* in the box whose top-left corner is (*x*, *y*).

        The box grows to fit the wrapped text unless *clip* is set, in which
        case it keeps *height* and lines that fall below it are dropped.
        Returns the height actually used; empty text draws nothing and
        returns 0.
        """
        font = self.font_for(style)
        lines = self.wrap_lines(canvas, text, width - 2 * style.padding, font)
        if not lines:
            return 0.0

        leading = style.leading
        content_height = self.text_height(len(lines), style)
        needed = content_height + 2 * style.padding
        actual = height if clip else max(height, needed)
        bottom = y - actual

        if style.fill_background:
            canvas.fill_rect(x, bottom, width, actual, style.background_color)
        if style.draw_border:
            canvas.stroke_rect(x, bottom, width, actual, style.border_color, style.border_width)

        block_top = self._block_top(y, actual, content_height, style)
        dropped = 0
        for index, line in enumerate(lines):
            slot_top = block_top - index * leading
            if clip and slot_top - leading < bottom - 1e-6:
                dropped = len(lines) - index
                break
            line_x = self.aligned_x(canvas, line, font, x, width, style.padding, style.text_align)
            canvas.draw_text(line_x, slot_top - style.font_size, line, font, style.text_color)
        if dropped:
            logger.warning("Text box clipped: %d of %d lines dropped", dropped, len(lines))
        return actual

    @staticmethod
    def _block_top(y: float, box_height: float, content_height: float, style: TextStyle) -> float:
        """Top of the first line; never above the box's top padding, so clipped text overflows downward."""
        top = y - style.padding
        if style.vertical_align is VerticalAlign.MIDDLE:
            return min(top, y - (box_height - content_height) / 2)
        if style.vertical_align is VerticalAlign.BOTTOM:
            return min(top, y - box_height + style.padding + content_height)
        return top

    @staticmethod
    def aligned_x(
        canvas: Canvas,
        line: str,
        font: Font,
        x: float,
        width: float,
        padding: float,
        align: TextAlign,
    ) -> float:
        if align is TextAlign.LEFT:
            return x + padding
        line_width = canvas.measure_text(line, font)
        if align is TextAlign.CENTER:
            return x + (width - line_width) / 2
        return x + width - padding - line_width

    # ------------------------------------------------------------------
    # Paginated writing
    # ------------------------------------------------------------------

    def write_text(self, paginator: Paginator, text: str | None, style: TextStyle | None = None) -> float:
        """
        Write a paragraph at the cursor across the usable width.

        A paragraph that fits on one page is kept together (one space check
        for its full height); a longer one flows line by line across pages.
        Returns the total height consumed.
        """
        style = style or TextStyle.normal()
        with layout_step("write_text", paginator):
            font = self.font_for(style)
            width = paginator.usable_width
            lines = self.wrap_lines(paginator.canvas, text, width, font)
            if not lines:
                return 0.0

            leading = style.leading
            total = self.text_height(len(lines), style)
            keep_together = total <= paginator.usable_height
            if keep_together:
                paginator.check_space(total)

            for line in lines:
                if not keep_together:
                    paginator.check_space(leading)
                canvas = paginator.canvas
                line_x = self.aligned_x(
                    canvas, line, font, paginator.start_x, width, 0.0, style.text_align
                )
                canvas.draw_text(
                    line_x, paginator.current_y - style.font_size, line, font, style.text_color
                )
                paginator.advance_y(leading)
            return total

    def write_text_box(
        self,
        paginator: Paginator,
        text: str | None,
        style: TextStyle | None = None,
        width: float | None = None,
        min_height: float = 0.0,
    ) -> float:
        """Boxed text block at the cursor; clipped to one page if taller."""
        style = style or TextStyle.boxed()
        with layout_step("write_text_box", paginator):
            width = width or paginator.usable_width
            needed = self.box_height(paginator.canvas, text, width, style, min_height)
            if needed == 0:
                return 0.0
            height = paginator.fit_height(needed)
            paginator.check_space(height)
            drawn = self.draw_box(
                paginator.canvas,
                text,
                paginator.start_x,
                paginator.current_y,
                width,
                height,
                style,
                clip=height < needed,
            )
            paginator.advance_y(drawn)
            return drawn
