"""
Table Layout Service – column widths, row heights and paginated tables.

Column widths are computed once per table and stay constant across pages.
Rows are placed one at a time through the paginator; whenever a row's
space check opens a new page the header row is drawn again at the top of
that page before the row itself.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from report_engine.exceptions import TableDataError, layout_step
from report_engine.models.styles import TableStyle, TextStyle, VerticalAlign
from report_engine.services.canvas_service import Canvas
from report_engine.services.paginator import Paginator
from report_engine.services.text_flow_service import TextFlowService

logger = logging.getLogger(__name__)

TableData = Sequence[Sequence[object]]


class TableLayoutService:
    """Lays out and draws header + body tables."""

    def __init__(self, text_flow: TextFlowService | None = None):
        self.text_flow = text_flow or TextFlowService()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @staticmethod
    def compute_column_widths(
        total_width: float,
        num_columns: int,
        ratios: Sequence[float] | None = None,
    ) -> list[float]:
        """
        Split *total_width* uniformly, or proportionally to *ratios*.

        Ratios must have one entry per column, be non-negative and have a
        positive sum; anything else raises :class:`TableDataError`.
        """
        if num_columns <= 0:
            raise TableDataError(f"A table needs at least one column, got {num_columns}")
        if ratios is None:
            return [total_width / num_columns] * num_columns

        weights = np.asarray(ratios, dtype=float)
        if weights.shape != (num_columns,):
            raise TableDataError(
                f"{weights.size} column ratios given for {num_columns} columns"
            )
        if not np.isfinite(weights).all() or (weights < 0).any():
            raise TableDataError(f"Column ratios must be finite and non-negative: {list(ratios)}")
        weight_sum = weights.sum()
        if weight_sum <= 0:
            raise TableDataError("Column ratios must not all be zero")
        return (weights / weight_sum * total_width).tolist()

    @staticmethod
    def column_positions(x: float, widths: Sequence[float]) -> list[float]:
        """Left edge of every column for a table starting at *x*."""
        offsets = np.concatenate(([0.0], np.cumsum(widths)[:-1]))
        return (x + offsets).tolist()

    @staticmethod
    def validate_table(data: TableData) -> list[list[str]]:
        """Return the rows as strings; reject empty tables and ragged rows."""
        if not data:
            raise TableDataError("Table has no rows")
        rows = [["" if cell is None else str(cell) for cell in row] for row in data]
        num_columns = len(rows[0])
        if num_columns == 0:
            raise TableDataError("Header row has no cells")
        for index, row in enumerate(rows):
            if len(row) != num_columns:
                raise TableDataError(
                    f"Row {index} has {len(row)} cells, expected {num_columns}"
                )
        return rows

    @staticmethod
    def cell_style(style: TableStyle, is_header: bool) -> TextStyle:
        """Text style used for the cells of a header or body row."""
        if is_header:
            return TextStyle(
                font_style=style.header_font_style,
                font_size=style.header_font_size,
                text_color=style.header_text_color,
                text_align=style.header_align,
                vertical_align=VerticalAlign.TOP,
                line_spacing=style.line_spacing,
                padding=style.padding,
            )
        return TextStyle(
            font_style=style.font_style,
            font_size=style.font_size,
            text_color=style.text_color,
            text_align=style.align,
            vertical_align=VerticalAlign.TOP,
            line_spacing=style.line_spacing,
            padding=style.padding,
        )

    @classmethod
    def min_row_height(cls, style: TableStyle, is_header: bool = False) -> float:
        """One line of text plus padding top and bottom."""
        return 2 * style.padding + cls.cell_style(style, is_header).leading

    def row_height(
        self,
        canvas: Canvas,
        row: Sequence[str],
        widths: Sequence[float],
        style: TableStyle,
        is_header: bool = False,
    ) -> float:
        """
        Fixed height, or in auto-fit mode the tallest wrapped cell.

        Never less than one line plus padding top and bottom.
        """
        text_style = self.cell_style(style, is_header)
        line_height = text_style.leading
        floor = self.min_row_height(style, is_header)
        if not style.auto_fit:
            return max(style.row_height, floor)

        font = self.text_flow.font_for(text_style)
        tallest = style.row_height
        for text, width in zip(row, widths):
            lines = self.text_flow.wrap_lines(canvas, text, width - 2 * style.padding, font)
            tallest = max(tallest, len(lines) * line_height + 2 * style.padding)
        return max(tallest, floor)

    # ------------------------------------------------------------------
    # Paginated rendering
    # ------------------------------------------------------------------

    def render_table(
        self,
        paginator: Paginator,
        data: TableData,
        style: TableStyle | None = None,
    ) -> float:
        """
        Draw *data* (row 0 is the header) at the cursor, breaking pages as
        needed and repeating the header on every continuation page.

        Returns the summed height of the header and all body rows; repeated
        headers and page breaks are not counted.
        """
        style = style or TableStyle.simple()
        with layout_step("render_table", paginator):
            rows = self.validate_table(data)
            header, body = rows[0], rows[1:]
            widths = self.compute_column_widths(
                style.width or paginator.usable_width, len(header), style.column_ratios
            )

            canvas = paginator.canvas
            header_height = paginator.fit_height(self.row_height(canvas, header, widths, style, True))
            body_heights = [
                paginator.fit_height(self.row_height(canvas, row, widths, style)) for row in body
            ]

            # a page always holds the header plus at least one line of a body row
            min_row = self.min_row_height(style)
            header_limit = paginator.usable_height - min_row
            if body and header_limit > 0 and header_height > header_limit:
                logger.warning(
                    "Header row (%.1fpt) leaves no room for body rows; clipping to %.1fpt",
                    header_height,
                    header_limit,
                )
                header_height = header_limit

            # keep the header together with the first body row
            first_block = header_height + (body_heights[0] if body_heights else 0.0)
            paginator.check_space(paginator.fit_height(first_block))
            self._draw_paginated_row(paginator, header, widths, header_height, style, True, 0)
            total = header_height

            header_only = True
            for index, (row, height) in enumerate(zip(body, body_heights)):
                if not header_only and paginator.check_space(height):
                    logger.debug("Table continues on page %d; repeating header", paginator.page_count)
                    self._draw_paginated_row(paginator, header, widths, header_height, style, True, 0)
                    header_only = True
                if header_only and not paginator.has_space(height):
                    # breaking here would strand the header alone on its page
                    clipped = max(paginator.available_height, min_row)
                    logger.warning(
                        "Row %d does not fit below the header; clipping to %.1fpt", index, clipped
                    )
                    height = clipped
                self._draw_paginated_row(paginator, row, widths, height, style, False, index)
                header_only = False
                total += body_heights[index]
            return total

    def _draw_paginated_row(
        self,
        paginator: Paginator,
        cells: Sequence[str],
        widths: Sequence[float],
        height: float,
        style: TableStyle,
        is_header: bool,
        row_index: int,
    ) -> None:
        self.draw_row(
            paginator.canvas,
            cells,
            paginator.start_x,
            paginator.current_y,
            widths,
            height,
            style,
            is_header,
            row_index,
        )
        paginator.advance_y(height)

    # ------------------------------------------------------------------
    # Fixed-position rendering
    # ------------------------------------------------------------------

    def draw_table(
        self,
        canvas: Canvas,
        data: TableData,
        x: float,
        y: float,
        style: TableStyle | None = None,
    ) -> float:
        """Draw the whole table at (*x*, *y*) on one page; returns its height."""
        style = style or TableStyle.simple()
        rows = self.validate_table(data)
        widths = self.compute_column_widths(
            style.width or canvas.width - x, len(rows[0]), style.column_ratios
        )
        current_y = y
        for index, row in enumerate(rows):
            is_header = index == 0
            height = self.row_height(canvas, row, widths, style, is_header)
            self.draw_row(canvas, row, x, current_y, widths, height, style, is_header, index - 1)
            current_y -= height
        return y - current_y

    def draw_row(
        self,
        canvas: Canvas,
        cells: Sequence[str],
        x: float,
        y: float,
        widths: Sequence[float],
        height: float,
        style: TableStyle,
        is_header: bool,
        row_index: int,
    ) -> None:
        """Fill, text, then borders for one row whose top edge is at *y*."""
        bottom = y - height
        fill = style.header_background if is_header else style.row_color(row_index)
        canvas.fill_rect(x, bottom, float(sum(widths)), height, fill)

        text_style = self.cell_style(style, is_header)
        positions = self.column_positions(x, widths)
        for text, cell_x, width in zip(cells, positions, widths):
            self.text_flow.draw_box(canvas, text, cell_x, y, width, height, text_style, clip=True)

        draw_borders = style.draw_header_border if is_header else style.draw_cell_borders
        if draw_borders and style.borders_visible:
            for cell_x, width in zip(positions, widths):
                canvas.stroke_rect(
                    cell_x,
                    bottom,
                    width,
                    height,
                    style.border_color,
                    style.border_width,
                    style.dash_pattern,
                )
