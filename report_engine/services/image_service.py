"""
Image Service – raster images and ruled lines.

Images are placed either at explicit coordinates or at the paginator's
cursor. The drawn size comes from :class:`ImageStyle`'s scale mode; an
image still taller than one page is shrunk to the usable height.
"""

from __future__ import annotations

import logging

from report_engine.exceptions import LayoutError, layout_step
from report_engine.models.styles import ImageStyle, LineStyle, TextAlign
from report_engine.services.canvas_service import Canvas
from report_engine.services.paginator import Paginator

logger = logging.getLogger(__name__)

IMAGE_SPACING = 5.0
LINE_SPACING = 5.0


class ImageService:
    """Draws images, horizontal and vertical lines."""

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def measure(canvas: Canvas, data: bytes, style: ImageStyle) -> tuple[float, float]:
        """Drawn (width, height) of *data* under *style*."""
        if not data:
            raise LayoutError("Image data is empty", operation="image")
        try:
            original = canvas.image_size(data)
        except LayoutError:
            raise
        except Exception as exc:
            raise LayoutError("Image could not be decoded", operation="image") from exc
        return style.scaled_size(*original)

    def draw_image(
        self,
        canvas: Canvas,
        data: bytes,
        x: float,
        y: float,
        style: ImageStyle | None = None,
    ) -> tuple[float, float]:
        """Draw with the bottom-left corner at (*x*, *y*); returns the drawn size."""
        style = style or ImageStyle()
        width, height = self.measure(canvas, data, style)
        self._draw(canvas, data, x, y, width, height, style)
        return width, height

    def insert_image(
        self,
        paginator: Paginator,
        data: bytes,
        style: ImageStyle | None = None,
    ) -> float:
        """
        Place the image at the cursor, aligned within the usable width.

        Returns the height consumed (image height plus the trailing gap).
        """
        style = style or ImageStyle()
        with layout_step("insert_image", paginator):
            width, height = self.measure(paginator.canvas, data, style)
            usable = paginator.usable_height - IMAGE_SPACING
            if height > usable:
                logger.warning(
                    "Image %.0fx%.0fpt taller than the page; scaling to %.1fpt high",
                    width,
                    height,
                    usable,
                )
                width, height = width * usable / height, usable

            paginator.check_space(height + IMAGE_SPACING)
            x = aligned_left(paginator.start_x, paginator.usable_width, width, style.align)
            self._draw(paginator.canvas, data, x, paginator.current_y - height, width, height, style)
            paginator.advance_y(height + IMAGE_SPACING)
            return height + IMAGE_SPACING

    @staticmethod
    def _draw(canvas, data, x, y, width, height, style: ImageStyle) -> None:
        try:
            canvas.draw_image(data, x, y, width, height, opacity=style.opacity)
        except LayoutError:
            raise
        except Exception as exc:
            raise LayoutError("Image could not be drawn", operation="image") from exc
        if style.draw_border:
            canvas.stroke_rect(x, y, width, height, style.border_color, style.border_width)

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    @staticmethod
    def draw_horizontal_line(
        canvas: Canvas,
        x: float,
        y: float,
        length: float,
        style: LineStyle | None = None,
    ) -> None:
        style = style or LineStyle()
        canvas.stroke_line(x, y, x + length, y, style.color, style.thickness, style.dash_pattern)

    @staticmethod
    def draw_vertical_line(
        canvas: Canvas,
        x: float,
        y: float,
        length: float,
        style: LineStyle | None = None,
    ) -> None:
        """Line running downward from (*x*, *y*)."""
        style = style or LineStyle()
        canvas.stroke_line(x, y, x, y - length, style.color, style.thickness, style.dash_pattern)

    def insert_horizontal_line(
        self,
        paginator: Paginator,
        style: LineStyle | None = None,
        width: float | None = None,
    ) -> float:
        """Rule across the usable width at the cursor."""
        style = style or LineStyle()
        with layout_step("insert_horizontal_line", paginator):
            needed = style.thickness + LINE_SPACING
            paginator.check_space(needed)
            self.draw_horizontal_line(
                paginator.canvas,
                paginator.start_x,
                paginator.current_y,
                width or paginator.usable_width,
                style,
            )
            paginator.advance_y(needed)
            return needed


def aligned_left(start_x: float, available: float, width: float, align: TextAlign) -> float:
    """Left x of a block of *width* aligned inside [start_x, start_x + available]."""
    if align is TextAlign.CENTER:
        return start_x + (available - width) / 2
    if align is TextAlign.RIGHT:
        return start_x + available - width
    return start_x
