"""
Report Service – composes complete tabular reports.

Layout, top to bottom: institution header (logos left/right, name,
department, address, phone), title, optional subtitle, optional QR code on
the right, the table (header repeated on every page) or a "no data"
message, optional chart and a generation-date footer. Watermark and page
numbers are applied to every page on save.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from report_engine.models.schemas import ReportSettings
from report_engine.models.styles import (
    GRAY,
    ChartStyle,
    FontStyle,
    ImageStyle,
    QRCodeStyle,
    ScaleMode,
    TableStyle,
    TextAlign,
    TextStyle,
    WatermarkStyle,
)
from report_engine.repository.asset_repository import AssetRepository
from report_engine.services.chart_service import ChartData
from report_engine.services.paginator import Paginator
from report_engine.services.pdf_service import PdfService
from report_engine.services.table_layout_service import TableData

logger = logging.getLogger(__name__)

LOGO_SIZE = 60.0
LOGO_GAP = 10.0
HEADER_GAP = 20.0
QR_SIZE = 50.0
TITLE_COLOR = "#003366"
NO_DATA_MESSAGE = "No data found for this report."

_WATERMARK_PRESETS = {
    "confidential": WatermarkStyle.confidential,
    "draft": WatermarkStyle.draft,
    "copy": WatermarkStyle.copy_mark,
    "sample": WatermarkStyle.sample,
}


def watermark_style(name: str | None) -> WatermarkStyle | None:
    """Preset by name (case-insensitive), otherwise a custom text watermark."""
    if not name:
        return None
    preset = _WATERMARK_PRESETS.get(name.strip().lower())
    return preset() if preset else WatermarkStyle.custom(name)


def table_style(
    preset: str = "simple",
    header_color: str | None = None,
    column_ratios: Sequence[float] | None = None,
) -> TableStyle:
    if preset == "colorful":
        style = TableStyle.colorful(header_color or "#FF8C00")
    else:
        style = getattr(TableStyle, preset)()
        if header_color:
            style = style.evolve(header_background=header_color)
    if column_ratios:
        style = style.with_column_ratios(*column_ratios)
    return style


class ReportService:
    """Builds header + table reports and returns their PDF bytes."""

    def __init__(
        self,
        pdf: PdfService | None = None,
        assets: AssetRepository | None = None,
        settings: ReportSettings | None = None,
    ):
        self.pdf = pdf or PdfService()
        self.assets = assets or AssetRepository()
        self.settings = settings or ReportSettings()

    def build_table_report(
        self,
        title: str,
        data: Optional[TableData],
        *,
        subtitle: str | None = None,
        style: TableStyle | None = None,
        landscape: bool | None = None,
        watermark: WatermarkStyle | None = None,
        chart: tuple[ChartData, ChartStyle] | None = None,
        qr_content: str | None = None,
        generated_on: date | None = None,
    ) -> bytes:
        """
        *data* holds the header row followed by the body rows; with no body
        rows the report shows a "no data" message instead of a table.
        """
        settings = self.settings
        watermark = watermark or watermark_style(settings.watermark)
        generated_on = generated_on or date.today()

        def build(paginator: Paginator) -> None:
            if settings.has_header:
                self._draw_institution_header(paginator)
            self._draw_title(paginator, title, subtitle)
            if qr_content:
                self.pdf.insert_qr_code(
                    paginator, qr_content, QRCodeStyle.medium().sized(QR_SIZE).no_margin(), TextAlign.RIGHT
                )
                paginator.add_space(12.5)
            if data is not None and len(data) > 1:
                self.pdf.create_table(paginator, data, style)
            else:
                self._draw_no_data(paginator)
            if chart is not None:
                paginator.add_space()
                self.pdf.insert_chart(paginator, *chart)
            self._draw_footer(paginator, generated_on)

        pdf_bytes = self.pdf.render(
            build,
            geometry=settings.geometry(landscape),
            title=title,
            watermark=watermark,
            page_numbers=settings.page_number_format,
        )
        logger.info("Report %r generated (%d bytes)", title, len(pdf_bytes))
        return pdf_bytes

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _draw_institution_header(self, paginator: Paginator) -> None:
        settings = self.settings
        canvas = paginator.canvas
        x, top, width = paginator.start_x, paginator.current_y, paginator.usable_width

        logo_style = ImageStyle(width=LOGO_SIZE, height=LOGO_SIZE, scale_mode=ScaleMode.FIT_BOX)
        for name, logo_x in ((settings.logo_left, x), (settings.logo_right, x + width - LOGO_SIZE)):
            data = self.assets.load_optional(name)
            if data:
                self.pdf.images.draw_image(canvas, data, logo_x, top - LOGO_SIZE, logo_style)

        text_x = x + LOGO_SIZE + LOGO_GAP
        text_width = width - 2 * (LOGO_SIZE + LOGO_GAP)
        base = TextStyle(text_align=TextAlign.CENTER, padding=2)
        lines = (
            (settings.institution, base.evolve(font_size=14, font_style=FontStyle.BOLD)),
            (settings.department, base.evolve(font_size=12)),
            (settings.address, base.evolve(font_size=10)),
            (settings.phone, base.evolve(font_size=10)),
        )
        y = top
        for text, text_style in lines:
            y -= self.pdf.text.draw_box(canvas, text, text_x, y, text_width, 0, text_style)

        paginator.advance_y(paginator.fit_height(max(top - y, LOGO_SIZE) + HEADER_GAP))

    def _draw_title(self, paginator: Paginator, title: str, subtitle: str | None) -> None:
        title_style = TextStyle.title().evolve(
            font_size=16, text_align=TextAlign.CENTER, text_color=TITLE_COLOR
        )
        self.pdf.write_text(paginator, title, title_style)
        if subtitle:
            self.pdf.write_text(
                paginator, subtitle, TextStyle(font_size=11, text_align=TextAlign.CENTER, text_color=GRAY)
            )
        paginator.add_space(7.5)

    def _draw_no_data(self, paginator: Paginator) -> None:
        paginator.add_space(50)
        self.pdf.write_text(
            paginator, NO_DATA_MESSAGE, TextStyle(font_size=12, text_align=TextAlign.CENTER, text_color=GRAY)
        )

    def _draw_footer(self, paginator: Paginator, generated_on: date) -> None:
        paginator.add_space()
        self.pdf.write_text(
            paginator,
            f"Report generated on {generated_on:%d/%m/%Y}",
            TextStyle(font_size=8, text_align=TextAlign.RIGHT, text_color=GRAY),
        )
