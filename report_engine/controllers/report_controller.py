"""
Report Controller – API route definitions.

Defines endpoints for the health check and for rendering a table report
from a JSON body into a PDF.
"""

from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from report_engine.models.schemas import ReportSettings, TableReportRequest
from report_engine.models.styles import ChartStyle, ChartType
from report_engine.repository.asset_repository import AssetRepository
from report_engine.services.chart_service import category_points, pie_points
from report_engine.services.pdf_service import PdfService
from report_engine.services.report_service import ReportService, table_style, watermark_style

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["reports"])


# ---------------------------------------------------------------------------
# Dependency injection helpers
# ---------------------------------------------------------------------------

def _get_settings() -> ReportSettings:
    try:
        return ReportSettings.from_env()
    except ValueError as e:
        logger.error("Invalid report configuration: %s", e)
        raise HTTPException(status_code=500, detail=f"Invalid report configuration: {str(e)}")


def _get_asset_repo() -> AssetRepository:
    return AssetRepository(os.getenv("REPORT_ASSETS_DIR", "assets"))


def _get_pdf_service() -> PdfService:
    return PdfService.with_font_directory(os.getenv("REPORT_FONT_DIR") or None)


def _get_report_service(
    settings: ReportSettings = Depends(_get_settings),
    assets: AssetRepository = Depends(_get_asset_repo),
    pdf: PdfService = Depends(_get_pdf_service),
) -> ReportService:
    return ReportService(pdf=pdf, assets=assets, settings=settings)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health")
async def health():
    """Health-check endpoint."""
    return {"status": "ok", "service": "Report Engine"}


@router.post("/reports/table")
def table_report(
    request: TableReportRequest,
    reports: ReportService = Depends(_get_report_service),
):
    """
    Render *request* as a PDF table report.

    The header row is repeated on every page; watermark and page numbers
    are applied to all pages. Malformed table data answers 422.
    """
    try:
        style = table_style(request.style, request.header_color, request.column_ratios)
        chart = None
        if request.chart is not None:
            spec = request.chart
            chart_style = ChartStyle(
                chart_type=spec.chart_type,
                title=spec.title,
                width=spec.width,
                height=spec.height,
            )
            points = (
                pie_points(spec.data)
                if spec.chart_type in (ChartType.PIE, ChartType.DONUT)
                else category_points(spec.series, spec.data)
            )
            chart = (points, chart_style)

        pdf_bytes = reports.build_table_report(
            request.title,
            [request.header, *request.rows],
            subtitle=request.subtitle,
            style=style,
            landscape=request.landscape,
            watermark=watermark_style(request.watermark),
            chart=chart,
            qr_content=request.qr_content,
        )
    except ValueError as e:
        logger.warning("Rejected report request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Report layout failed")
        raise HTTPException(status_code=500, detail=f"Report generation failed: {str(e)}")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{request.filename}"'},
    )
