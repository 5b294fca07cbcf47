"""
Pydantic schemas for report settings and the HTTP API.
"""

from __future__ import annotations

import os
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from report_engine.models.geometry import DEFAULT_MARGIN, PageGeometry
from report_engine.models.styles import ChartType, Color

TablePreset = Literal["simple", "modern", "minimal", "colorful"]


class ReportSettings(BaseModel):
    """Institution header and page setup shared by every generated report."""
    institution: str = ""
    department: str = ""
    address: str = ""
    phone: str = ""
    logo_left: Optional[str] = None    # asset name in the asset repository
    logo_right: Optional[str] = None
    page_size: str = "letter"
    margin: float = Field(DEFAULT_MARGIN, ge=0)
    landscape: bool = False
    page_number_format: Optional[str] = "Page {page} of {total}"
    watermark: Optional[str] = None

    @classmethod
    def from_env(cls) -> ReportSettings:
        """
        Read the ``REPORT_*`` environment variables; unset ones keep defaults.

        ``REPORT_PAGE_NUMBER_FORMAT`` set to an empty string disables page
        numbers. Malformed values raise :class:`ValueError`.
        """
        raw_margin = os.getenv("REPORT_MARGIN", str(DEFAULT_MARGIN))
        try:
            margin = float(raw_margin)
        except ValueError:
            raise ValueError(f"REPORT_MARGIN must be a number, got {raw_margin!r}") from None
        values: dict[str, Any] = {
            "institution": os.getenv("REPORT_INSTITUTION", ""),
            "department": os.getenv("REPORT_DEPARTMENT", ""),
            "address": os.getenv("REPORT_ADDRESS", ""),
            "phone": os.getenv("REPORT_PHONE", ""),
            "logo_left": os.getenv("REPORT_LOGO_LEFT") or None,
            "logo_right": os.getenv("REPORT_LOGO_RIGHT") or None,
            "page_size": os.getenv("REPORT_PAGE_SIZE", "letter"),
            "margin": margin,
            "watermark": os.getenv("REPORT_WATERMARK") or None,
        }
        page_numbers = os.getenv("REPORT_PAGE_NUMBER_FORMAT")
        if page_numbers is not None:
            values["page_number_format"] = page_numbers or None
        settings = cls(**values)
        settings.geometry()  # fail fast on an unknown page size
        return settings

    def geometry(self, landscape: Optional[bool] = None) -> PageGeometry:
        flag = self.landscape if landscape is None else landscape
        return PageGeometry.named(self.page_size, self.margin, flag)

    @property
    def has_header(self) -> bool:
        return bool(self.institution or self.logo_left or self.logo_right)


class ChartRequest(BaseModel):
    """Single-series chart drawn below the table."""
    chart_type: ChartType = ChartType.BAR_VERTICAL
    title: str = ""
    series: str = "Series 1"
    data: dict[str, float]
    width: float = Field(400.0, gt=0)
    height: float = Field(250.0, gt=0)


class TableReportRequest(BaseModel):
    """Body of ``POST /api/v1/reports/table``."""
    title: str
    subtitle: Optional[str] = None
    header: list[str] = Field(..., min_length=1)
    rows: list[list[Any]] = Field(default_factory=list)
    column_ratios: Optional[list[float]] = None
    style: TablePreset = "simple"
    header_color: Optional[Color] = None
    landscape: Optional[bool] = None
    watermark: Optional[str] = None
    chart: Optional[ChartRequest] = None
    qr_content: Optional[str] = None
    # quoted into Content-Disposition
    filename: str = Field("report.pdf", max_length=128, pattern=r"^[\w][\w .()-]*\.pdf$")
