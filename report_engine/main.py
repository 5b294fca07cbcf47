"""
Report Engine — FastAPI Application Factory.

Registers the report controller router and configures CORS, logging and
lifespan events (optional font registration on startup).
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from report_engine.controllers.report_controller import router as report_router

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

log_level = os.getenv("LOG_LEVEL", "info").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger("report_engine")


# ---------------------------------------------------------------------------
# Lifespan (startup / shutdown)
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    - **Startup**: register the TrueType family from ``REPORT_FONT_DIR`` so a
      missing font shows up in the log instead of on the first request.
    - **Shutdown**: nothing to release.
    """
    logger.info("Report Engine starting up")
    font_dir = os.getenv("REPORT_FONT_DIR")
    if font_dir:
        from report_engine.services.canvas_service import FontFamily
        try:
            FontFamily.from_directory(font_dir)
        except Exception as e:
            logger.warning("Font registration from %s failed: %s", font_dir, e)
    yield
    logger.info("Report Engine shutting down")


# ---------------------------------------------------------------------------
# App instance
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Report Engine",
    description=(
        "Paginated PDF report generation. "
        "Post a table (header + rows) and receive a PDF with repeated table "
        "headers, optional chart, QR code, watermark and page numbers."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow all origins during development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(report_router)


@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Report Engine v1.0.0", "docs": "/docs"}
