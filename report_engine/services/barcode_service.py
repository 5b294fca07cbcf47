"""
Barcode Service – linear barcodes and QR codes via reportlab's barcode
widgets.

Symbols are built as vector drawings (``createBarcodeDrawing``) scaled to
the style's box, so they stay sharp at any zoom level. Also provides the
payload builders for the common QR "smart" formats (vCard, WiFi, mailto,
tel, sms, geo).
"""

from __future__ import annotations

import logging

from reportlab.graphics.barcode import createBarcodeDrawing
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors

from report_engine.exceptions import LayoutError, layout_step
from report_engine.models.styles import BarcodeStyle, BarcodeType, QRCodeStyle, TextAlign
from report_engine.services.canvas_service import Canvas
from report_engine.services.image_service import aligned_left
from report_engine.services.paginator import Paginator

logger = logging.getLogger(__name__)

CODE_SPACING = 5.0

_WIDGETS = {
    BarcodeType.CODE_128: "Code128",
    BarcodeType.CODE_39: "Standard39",
    BarcodeType.EAN_13: "EAN13",
    BarcodeType.EAN_8: "EAN8",
    BarcodeType.UPC_A: "UPCA",
    BarcodeType.ITF: "I2of5",
    BarcodeType.CODABAR: "Codabar",
}


class BarcodeService:
    """Encodes and places barcodes and QR codes."""

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    @staticmethod
    def barcode_drawing(content: str, style: BarcodeStyle | None = None) -> Drawing:
        style = style or BarcodeStyle()
        if not content:
            raise LayoutError("Barcode content must not be empty", operation="barcode")
        widget = _WIDGETS[style.barcode_type]
        try:
            return createBarcodeDrawing(
                widget,
                value=content,
                width=style.width,
                height=style.height,
                humanReadable=style.show_text,
                barFillColor=colors.toColor(style.foreground_color),
                barStrokeColor=colors.toColor(style.foreground_color),
                quiet=style.margin > 0,
            )
        except Exception as exc:
            raise LayoutError(
                f"Cannot encode {content!r} as {style.barcode_type.value}: {exc}",
                operation="barcode",
            ) from exc

    @staticmethod
    def qr_drawing(content: str, style: QRCodeStyle | None = None) -> Drawing:
        style = style or QRCodeStyle()
        if not content:
            raise LayoutError("QR code content must not be empty", operation="qr_code")
        try:
            drawing = createBarcodeDrawing(
                "QR",
                value=content,
                width=style.size,
                height=style.size,
                barLevel=style.error_correction.value,
                barBorder=style.margin,
                barFillColor=colors.toColor(style.foreground_color),
            )
        except Exception as exc:
            raise LayoutError(f"Cannot encode QR code: {exc}", operation="qr_code") from exc
        return drawing

    # ------------------------------------------------------------------
    # Fixed position
    # ------------------------------------------------------------------

    def draw_barcode(
        self,
        canvas: Canvas,
        content: str,
        x: float,
        y: float,
        style: BarcodeStyle | None = None,
    ) -> None:
        """Bottom-left corner at (*x*, *y*)."""
        style = style or BarcodeStyle()
        drawing = self.barcode_drawing(content, style)
        canvas.fill_rect(x, y, style.width, style.height, style.background_color)
        canvas.draw_graphic(drawing, x, y, opacity=style.opacity)

    def draw_qr_code(
        self,
        canvas: Canvas,
        content: str,
        x: float,
        y: float,
        style: QRCodeStyle | None = None,
    ) -> None:
        style = style or QRCodeStyle()
        drawing = self.qr_drawing(content, style)
        canvas.fill_rect(x, y, style.size, style.size, style.background_color)
        canvas.draw_graphic(drawing, x, y, opacity=style.opacity)

    # ------------------------------------------------------------------
    # Paginated
    # ------------------------------------------------------------------

    def insert_barcode(
        self,
        paginator: Paginator,
        content: str,
        style: BarcodeStyle | None = None,
        align: TextAlign = TextAlign.LEFT,
    ) -> float:
        style = style or BarcodeStyle()
        with layout_step("insert_barcode", paginator):
            drawing = self.barcode_drawing(content, style)
            return self._insert(paginator, drawing, style.width, style.height,
                                style.background_color, style.opacity, align)

    def insert_qr_code(
        self,
        paginator: Paginator,
        content: str,
        style: QRCodeStyle | None = None,
        align: TextAlign = TextAlign.LEFT,
    ) -> float:
        style = style or QRCodeStyle()
        with layout_step("insert_qr_code", paginator):
            drawing = self.qr_drawing(content, style)
            return self._insert(paginator, drawing, style.size, style.size,
                                style.background_color, style.opacity, align)

    @staticmethod
    def _insert(paginator, drawing, width, height, background, opacity, align) -> float:
        needed = paginator.fit_height(height + CODE_SPACING)
        paginator.check_space(needed)
        x = aligned_left(paginator.start_x, paginator.usable_width, width, align)
        y = paginator.current_y - height
        canvas = paginator.canvas
        canvas.fill_rect(x, y, width, height, background)
        canvas.draw_graphic(drawing, x, y, opacity=opacity)
        paginator.advance_y(needed)
        return needed


# ---------------------------------------------------------------------------
# QR payloads
# ---------------------------------------------------------------------------

def vcard_payload(
    name: str,
    phone: str | None = None,
    email: str | None = None,
    company: str | None = None,
) -> str:
    lines = ["BEGIN:VCARD", "VERSION:3.0", f"FN:{name}"]
    if phone:
        lines.append(f"TEL:{phone}")
    if email:
        lines.append(f"EMAIL:{email}")
    if company:
        lines.append(f"ORG:{company}")
    lines.append("END:VCARD")
    return "\n".join(lines)


def wifi_payload(
    ssid: str,
    password: str | None = None,
    encryption: str | None = "WPA",
    hidden: bool = False,
) -> str:
    """``WIFI:T:WPA;S:<ssid>;P:<password>;;`` as read by phone cameras."""
    parts = [f"T:{encryption or 'WPA'};", f"S:{ssid};"]
    if password:
        parts.append(f"P:{password};")
    if hidden:
        parts.append("H:true;")
    return "WIFI:" + "".join(parts) + ";"


def email_payload(address: str, subject: str | None = None, body: str | None = None) -> str:
    params = []
    if subject:
        params.append(f"subject={subject}")
    if body:
        params.append(f"body={body}")
    query = "?" + "&".join(params) if params else ""
    return f"mailto:{address}{query}"


def phone_payload(number: str) -> str:
    return f"tel:{number}"


def sms_payload(number: str, message: str | None = None) -> str:
    return f"sms:{number}?body={message}" if message else f"sms:{number}"


def geo_payload(latitude: float, longitude: float) -> str:
    return f"geo:{latitude:f},{longitude:f}"
