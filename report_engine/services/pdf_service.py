"""
PDF Service – single entry point for building paginated PDF documents.

Bundles the text, table, image, barcode, chart and decoration services
behind one object sharing a font family, and owns the document lifecycle:

    service = PdfService()
    pdf_bytes = service.render(lambda p: service.write_text(p, "Hello"))
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Sequence

import pandas as pd

from report_engine.models.geometry import PageGeometry
from report_engine.models.styles import (
    BarcodeStyle,
    ChartStyle,
    ImageStyle,
    LineStyle,
    QRCodeStyle,
    TableStyle,
    TextAlign,
    TextStyle,
    WatermarkStyle,
)
from report_engine.services.barcode_service import BarcodeService
from report_engine.services.canvas_service import Document, FontFamily, ReportLabDocument
from report_engine.services.chart_service import ChartData, ChartService
from report_engine.services.decoration_service import PAGE_NUMBER_FORMAT, DecorationService
from report_engine.services.image_service import ImageService
from report_engine.services.paginator import Paginator
from report_engine.services.table_data_service import table_from_dataframe, table_from_records
from report_engine.services.table_layout_service import TableData, TableLayoutService
from report_engine.services.text_flow_service import TextFlowService

logger = logging.getLogger(__name__)


class PdfService:
    """Builds paginated PDF documents."""

    def __init__(self, fonts: FontFamily | None = None):
        self.fonts = fonts or FontFamily()
        self.text = TextFlowService(self.fonts)
        self.tables = TableLayoutService(self.text)
        self.images = ImageService()
        self.barcodes = BarcodeService()
        self.charts = ChartService()
        self.decorations = DecorationService(self.fonts)

    @classmethod
    def with_font_directory(cls, directory: Path | str | None) -> PdfService:
        """Use the TrueType family in *directory*, or Helvetica when None."""
        if directory is None:
            return cls()
        return cls(FontFamily.from_directory(directory))

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def create_document(title: str | None = None, author: str | None = None) -> ReportLabDocument:
        return ReportLabDocument(title=title, author=author)

    @contextmanager
    def paginate(
        self,
        document: Document,
        geometry: PageGeometry | None = None,
    ) -> Iterator[Paginator]:
        """Paginator over *document*, closed on exit even when the body raises."""
        with Paginator(geometry or PageGeometry.letter(), document) as paginator:
            yield paginator
            logger.info("Layout finished on page %d", paginator.page_count)

    def render(
        self,
        build: Callable[[Paginator], Any],
        geometry: PageGeometry | None = None,
        title: str | None = None,
        watermark: WatermarkStyle | None = None,
        page_numbers: str | None = PAGE_NUMBER_FORMAT,
    ) -> bytes:
        """
        Run *build* against a fresh paginator and return the PDF bytes.

        Decorators are registered before layout and applied on save, so
        page numbers know the final page total.
        """
        document = self.create_document(title=title)
        if watermark is not None:
            self.decorations.add_watermark(document, watermark)
        if page_numbers:
            self.decorations.add_page_numbers(document, page_numbers)
        with self.paginate(document, geometry) as paginator:
            build(paginator)
        return document.save()

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def write_text(self, paginator: Paginator, text: str, style: TextStyle | None = None) -> float:
        return self.text.write_text(paginator, text, style)

    def write_text_box(
        self,
        paginator: Paginator,
        text: str,
        style: TextStyle | None = None,
        width: float | None = None,
        min_height: float = 0.0,
    ) -> float:
        return self.text.write_text_box(paginator, text, style, width, min_height)

    def add_space(self, paginator: Paginator, amount: float | None = None) -> bool:
        return paginator.add_space() if amount is None else paginator.add_space(amount)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def create_table(self, paginator: Paginator, data: TableData, style: TableStyle | None = None) -> float:
        return self.tables.render_table(paginator, data, style)

    def create_table_from_records(
        self,
        paginator: Paginator,
        records: Iterable[Any],
        style: TableStyle | None = None,
        fields: Sequence[str] | None = None,
    ) -> float:
        return self.tables.render_table(paginator, table_from_records(records, fields), style)

    def create_table_from_dataframe(
        self,
        paginator: Paginator,
        df: pd.DataFrame,
        style: TableStyle | None = None,
    ) -> float:
        return self.tables.render_table(paginator, table_from_dataframe(df), style)

    # ------------------------------------------------------------------
    # Lines, images, codes, charts
    # ------------------------------------------------------------------

    def draw_horizontal_line(self, paginator: Paginator, style: LineStyle | None = None) -> float:
        return self.images.insert_horizontal_line(paginator, style)

    def insert_image(self, paginator: Paginator, data: bytes, style: ImageStyle | None = None) -> float:
        return self.images.insert_image(paginator, data, style)

    def insert_barcode(
        self,
        paginator: Paginator,
        content: str,
        style: BarcodeStyle | None = None,
        align: TextAlign = TextAlign.LEFT,
    ) -> float:
        return self.barcodes.insert_barcode(paginator, content, style, align)

    def insert_qr_code(
        self,
        paginator: Paginator,
        content: str,
        style: QRCodeStyle | None = None,
        align: TextAlign = TextAlign.LEFT,
    ) -> float:
        return self.barcodes.insert_qr_code(paginator, content, style, align)

    def insert_chart(self, paginator: Paginator, data: ChartData, style: ChartStyle | None = None) -> float:
        return self.charts.insert_chart(paginator, data, style)
