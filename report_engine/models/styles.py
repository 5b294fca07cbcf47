"""
Style Models – immutable configuration consumed by the layout services.

Every style is a frozen pydantic model. Presets are classmethods and all
customisation goes through :meth:`StyleModel.evolve` (or one of the named
helpers built on it), which returns a validated copy. A preset such as
``TableStyle.minimal()`` can therefore be shared between tables and
customised independently without aliasing.

Colors are any string reportlab understands (``"#336699"``, ``"gray"``).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from reportlab.lib import colors


def _check_color(value: str) -> str:
    try:
        colors.toColor(value)
    except ValueError:
        raise ValueError(f"Unknown color '{value}'") from None
    return value


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


Color = Annotated[str, AfterValidator(_check_color)]
Opacity = Annotated[float, AfterValidator(_clamp_unit)]
Length = Annotated[float, Field(ge=0)]

BLACK = "#000000"
WHITE = "#FFFFFF"
GRAY = "#808080"
LIGHT_GRAY = "#C0C0C0"


def _lighten(color: str, amount: int = 200) -> str:
    """Add *amount* to each RGB channel (capped at 255)."""
    rgb = colors.toColor(color).rgb()
    r, g, b = (min(255, int(round(c * 255)) + amount) for c in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FontStyle(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class BorderStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    NONE = "none"


class LineType(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class ScaleMode(str, Enum):
    ORIGINAL = "original"
    FIT_WIDTH = "fit_width"
    FIT_HEIGHT = "fit_height"
    FIT_BOX = "fit_box"
    STRETCH = "stretch"


class BarcodeType(str, Enum):
    CODE_128 = "code128"
    CODE_39 = "code39"
    EAN_13 = "ean13"
    EAN_8 = "ean8"
    UPC_A = "upca"
    ITF = "itf"
    CODABAR = "codabar"


class ErrorCorrection(str, Enum):
    LOW = "L"
    MEDIUM = "M"
    QUARTILE = "Q"
    HIGH = "H"


class WatermarkType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class WatermarkPosition(str, Enum):
    CENTER = "center"
    DIAGONAL = "diagonal"
    TOP = "top"
    BOTTOM = "bottom"
    TILED = "tiled"


class ChartType(str, Enum):
    BAR_VERTICAL = "bar_vertical"
    BAR_HORIZONTAL = "bar_horizontal"
    PIE = "pie"
    DONUT = "donut"
    LINE = "line"
    AREA = "area"
    STACKED_BAR = "stacked_bar"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class StyleModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def evolve(self, **changes):
        """Return a validated copy with *changes* applied."""
        return type(self).model_validate({**self.model_dump(), **changes})


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

class TextStyle(StyleModel):
    font_style: FontStyle = FontStyle.NORMAL
    font_size: float = Field(12.0, gt=0)
    text_color: Color = BLACK
    text_align: TextAlign = TextAlign.LEFT
    vertical_align: VerticalAlign = VerticalAlign.TOP
    line_spacing: float = Field(1.2, gt=0)
    draw_border: bool = False
    border_color: Color = BLACK
    border_width: Length = 1.0
    fill_background: bool = False
    background_color: Color = WHITE
    padding: Length = 5.0

    @property
    def leading(self) -> float:
        return self.font_size * self.line_spacing

    def with_border(self, color: str = BLACK, width: float = 1.0) -> TextStyle:
        return self.evolve(draw_border=True, border_color=color, border_width=width)

    def without_border(self) -> TextStyle:
        return self.evolve(draw_border=False)

    def with_background(self, color: str) -> TextStyle:
        return self.evolve(fill_background=True, background_color=color)

    def without_background(self) -> TextStyle:
        return self.evolve(fill_background=False)

    @classmethod
    def normal(cls) -> TextStyle:
        return cls()

    @classmethod
    def title(cls) -> TextStyle:
        return cls(font_style=FontStyle.BOLD, font_size=18, text_align=TextAlign.CENTER)

    @classmethod
    def subtitle(cls) -> TextStyle:
        return cls(font_style=FontStyle.BOLD, font_size=14)

    @classmethod
    def header(cls) -> TextStyle:
        return cls(
            font_style=FontStyle.BOLD,
            font_size=12,
            fill_background=True,
            background_color="#C8C8C8",
            padding=8,
        )

    @classmethod
    def boxed(cls) -> TextStyle:
        return cls(draw_border=True, border_color=BLACK, border_width=1, padding=10)

    @classmethod
    def highlighted(cls, color: str) -> TextStyle:
        return cls(fill_background=True, background_color=color, padding=8)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class TableStyle(StyleModel):
    # width=None means "use the paginator's usable width"
    width: Optional[float] = Field(None, gt=0)
    row_height: Length = 25.0
    auto_fit: bool = True
    padding: Length = 5.0
    column_ratios: Optional[tuple[float, ...]] = None
    line_spacing: float = Field(1.2, gt=0)

    font_size: float = Field(10.0, gt=0)
    header_font_size: float = Field(10.0, gt=0)
    font_style: FontStyle = FontStyle.NORMAL
    header_font_style: FontStyle = FontStyle.BOLD
    text_color: Color = BLACK
    header_text_color: Color = BLACK

    header_background: Color = "#C8C8C8"
    row_background: Color = WHITE
    alternate_row_color: Color = "#F5F5F5"
    use_alternate_colors: bool = True

    border_style: BorderStyle = BorderStyle.SOLID
    border_width: Length = 0.5
    border_color: Color = GRAY
    draw_header_border: bool = True
    draw_cell_borders: bool = True

    align: TextAlign = TextAlign.LEFT
    header_align: TextAlign = TextAlign.CENTER

    @property
    def dash_pattern(self) -> list[float] | None:
        if self.border_style is BorderStyle.DASHED:
            return [5.0, 3.0]
        if self.border_style is BorderStyle.DOTTED:
            return [1.0, 2.0]
        return None

    @property
    def borders_visible(self) -> bool:
        return self.border_style is not BorderStyle.NONE and self.border_width > 0

    def row_color(self, row_index: int) -> str:
        """Fill for body row *row_index* (0-based): even rows base, odd rows alternate."""
        if not self.use_alternate_colors:
            return self.row_background
        return self.row_background if row_index % 2 == 0 else self.alternate_row_color

    def with_border(
        self,
        style: BorderStyle,
        width: float | None = None,
        color: str | None = None,
    ) -> TableStyle:
        return self.evolve(
            border_style=style,
            border_width=self.border_width if width is None else width,
            border_color=color or self.border_color,
        )

    def no_borders(self) -> TableStyle:
        return self.evolve(draw_cell_borders=False, draw_header_border=False)

    def no_alternate_colors(self) -> TableStyle:
        return self.evolve(use_alternate_colors=False)

    def with_alternate_color(self, color: str) -> TableStyle:
        return self.evolve(alternate_row_color=color, use_alternate_colors=True)

    def with_column_ratios(self, *ratios: float) -> TableStyle:
        return self.evolve(column_ratios=tuple(ratios) or None)

    @classmethod
    def simple(cls) -> TableStyle:
        return cls()

    @classmethod
    def modern(cls) -> TableStyle:
        return cls(
            header_background="#337AB7",
            header_text_color=WHITE,
            border_style=BorderStyle.NONE,
            alternate_row_color="#F0F8FF",
        )

    @classmethod
    def minimal(cls) -> TableStyle:
        return cls(
            header_background=WHITE,
            header_font_style=FontStyle.BOLD,
            border_style=BorderStyle.SOLID,
            border_width=0.5,
            border_color=LIGHT_GRAY,
            use_alternate_colors=False,
        )

    @classmethod
    def colorful(cls, header_color: str) -> TableStyle:
        return cls(
            header_background=header_color,
            header_text_color=WHITE,
            alternate_row_color=_lighten(header_color),
        )


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------

class LineStyle(StyleModel):
    line_type: LineType = LineType.SOLID
    thickness: float = Field(1.0, gt=0)
    color: Color = BLACK
    dash_length: float = Field(5.0, gt=0)
    gap_length: float = Field(3.0, gt=0)
    dot_length: float = Field(1.0, gt=0)

    @property
    def dash_pattern(self) -> list[float] | None:
        if self.line_type is LineType.DASHED:
            return [self.dash_length, self.gap_length]
        if self.line_type is LineType.DOTTED:
            return [self.dot_length, self.gap_length]
        return None

    def dashed(self, dash_length: float | None = None, gap_length: float | None = None) -> LineStyle:
        return self.evolve(
            line_type=LineType.DASHED,
            dash_length=dash_length or self.dash_length,
            gap_length=gap_length or self.gap_length,
        )

    def dotted(self, dot_length: float | None = None) -> LineStyle:
        return self.evolve(line_type=LineType.DOTTED, dot_length=dot_length or self.dot_length)

    @classmethod
    def solid_line(cls, color: str = BLACK, thickness: float = 1.0) -> LineStyle:
        return cls(color=color, thickness=thickness)

    @classmethod
    def dashed_line(cls, color: str = BLACK) -> LineStyle:
        return cls(line_type=LineType.DASHED, color=color)

    @classmethod
    def dotted_line(cls, color: str = BLACK) -> LineStyle:
        return cls(line_type=LineType.DOTTED, color=color)

    @classmethod
    def separator(cls) -> LineStyle:
        return cls(thickness=0.5, color=GRAY)

    @classmethod
    def thick(cls) -> LineStyle:
        return cls(thickness=3)

    @classmethod
    def thin(cls) -> LineStyle:
        return cls(thickness=0.5)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ImageStyle(StyleModel):
    width: float = Field(200.0, gt=0)
    height: float = Field(150.0, gt=0)
    scale_mode: ScaleMode = ScaleMode.FIT_BOX
    align: TextAlign = TextAlign.LEFT
    opacity: Opacity = 1.0
    draw_border: bool = False
    border_width: Length = 1.0
    border_color: Color = BLACK

    def scaled_size(self, original_width: float, original_height: float) -> tuple[float, float]:
        """Drawn (width, height) of an image of the given intrinsic size."""
        if self.scale_mode is ScaleMode.ORIGINAL:
            return original_width, original_height
        if self.scale_mode is ScaleMode.FIT_WIDTH:
            return self.width, original_height * (self.width / original_width)
        if self.scale_mode is ScaleMode.FIT_HEIGHT:
            return original_width * (self.height / original_height), self.height
        if self.scale_mode is ScaleMode.STRETCH:
            return self.width, self.height
        scale = min(self.width / original_width, self.height / original_height)
        return original_width * scale, original_height * scale

    def centered(self) -> ImageStyle:
        return self.evolve(align=TextAlign.CENTER)

    def with_border(self, color: str = BLACK, width: float = 1.0) -> ImageStyle:
        return self.evolve(draw_border=True, border_color=color, border_width=width)

    @classmethod
    def thumbnail(cls) -> ImageStyle:
        return cls(width=100, height=100)

    @classmethod
    def medium(cls) -> ImageStyle:
        return cls(width=200, height=150)

    @classmethod
    def large(cls) -> ImageStyle:
        return cls(width=400, height=300)

    @classmethod
    def full_width(cls, page_width: float) -> ImageStyle:
        return cls(width=page_width, scale_mode=ScaleMode.FIT_WIDTH)

    @classmethod
    def centered_box(cls) -> ImageStyle:
        return cls(align=TextAlign.CENTER)


# ---------------------------------------------------------------------------
# Barcodes / QR codes
# ---------------------------------------------------------------------------

class BarcodeStyle(StyleModel):
    barcode_type: BarcodeType = BarcodeType.CODE_128
    width: float = Field(200.0, gt=0)
    height: float = Field(60.0, gt=0)
    foreground_color: Color = BLACK
    background_color: Color = WHITE
    show_text: bool = True
    margin: Length = 0.0
    opacity: Opacity = 1.0

    def sized(self, width: float, height: float) -> BarcodeStyle:
        return self.evolve(width=width, height=height)

    def hide_text(self) -> BarcodeStyle:
        return self.evolve(show_text=False)

    @classmethod
    def of(cls, barcode_type: BarcodeType) -> BarcodeStyle:
        return cls(barcode_type=barcode_type)

    @classmethod
    def code128(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.CODE_128)

    @classmethod
    def code39(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.CODE_39)

    @classmethod
    def ean13(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.EAN_13)

    @classmethod
    def ean8(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.EAN_8)

    @classmethod
    def upc_a(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.UPC_A)

    @classmethod
    def itf(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.ITF)

    @classmethod
    def codabar(cls) -> BarcodeStyle:
        return cls.of(BarcodeType.CODABAR)


class QRCodeStyle(StyleModel):
    size: float = Field(150.0, gt=0)
    foreground_color: Color = BLACK
    background_color: Color = WHITE
    error_correction: ErrorCorrection = ErrorCorrection.MEDIUM
    # quiet zone, in modules
    margin: int = Field(1, ge=0)
    opacity: Opacity = 1.0

    def sized(self, size: float) -> QRCodeStyle:
        return self.evolve(size=size)

    def high_error_correction(self) -> QRCodeStyle:
        return self.evolve(error_correction=ErrorCorrection.HIGH)

    def no_margin(self) -> QRCodeStyle:
        return self.evolve(margin=0)

    @classmethod
    def small(cls) -> QRCodeStyle:
        return cls(size=80)

    @classmethod
    def medium(cls) -> QRCodeStyle:
        return cls(size=150)

    @classmethod
    def large(cls) -> QRCodeStyle:
        return cls(size=250)

    @classmethod
    def high_quality(cls) -> QRCodeStyle:
        return cls(size=300, error_correction=ErrorCorrection.HIGH)

    @classmethod
    def compact(cls) -> QRCodeStyle:
        return cls(size=100, error_correction=ErrorCorrection.LOW, margin=0)


# ---------------------------------------------------------------------------
# Watermarks
# ---------------------------------------------------------------------------

class WatermarkStyle(StyleModel):
    watermark_type: WatermarkType = WatermarkType.TEXT
    text: str = "CONFIDENTIAL"
    image: Optional[bytes] = None
    position: WatermarkPosition = WatermarkPosition.DIAGONAL
    rotation: float = 45.0
    opacity: Opacity = 0.3
    color: Color = "#D3D3D3"
    font_size: float = Field(60.0, gt=0)
    font_style: FontStyle = FontStyle.BOLD
    tile_spacing_x: float = Field(200.0, gt=0)
    tile_spacing_y: float = Field(200.0, gt=0)

    def with_text(self, text: str) -> WatermarkStyle:
        return self.evolve(watermark_type=WatermarkType.TEXT, text=text)

    def with_image(self, image: bytes) -> WatermarkStyle:
        return self.evolve(watermark_type=WatermarkType.IMAGE, image=image)

    def diagonal(self) -> WatermarkStyle:
        return self.evolve(position=WatermarkPosition.DIAGONAL, rotation=45.0)

    def centered(self) -> WatermarkStyle:
        return self.evolve(position=WatermarkPosition.CENTER, rotation=0.0)

    def tiled(self, spacing_x: float | None = None, spacing_y: float | None = None) -> WatermarkStyle:
        return self.evolve(
            position=WatermarkPosition.TILED,
            tile_spacing_x=spacing_x or self.tile_spacing_x,
            tile_spacing_y=spacing_y or self.tile_spacing_y,
        )

    @classmethod
    def confidential(cls) -> WatermarkStyle:
        return cls(text="CONFIDENTIAL", opacity=0.2, color="#FF0000")

    @classmethod
    def draft(cls) -> WatermarkStyle:
        return cls(text="DRAFT", opacity=0.3, color=GRAY)

    @classmethod
    def copy_mark(cls) -> WatermarkStyle:
        return cls(text="COPY", opacity=0.25, color="#0000FF")

    @classmethod
    def sample(cls) -> WatermarkStyle:
        return cls(text="SAMPLE", opacity=0.2, color="#800080")

    @classmethod
    def custom(cls, text: str) -> WatermarkStyle:
        return cls(text=text)


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------

DEFAULT_SERIES_COLORS: tuple[str, ...] = (
    "#4F81BD",
    "#C0504D",
    "#9BBB59",
    "#8064A2",
    "#4BACC6",
    "#F79646",
    "#00B050",
    "#FFC000",
)


class ChartStyle(StyleModel):
    chart_type: ChartType = ChartType.BAR_VERTICAL
    width: float = Field(400.0, gt=0)
    height: float = Field(300.0, gt=0)
    title: str = ""
    x_axis_label: str = ""
    y_axis_label: str = ""
    show_legend: bool = True
    show_labels: bool = True
    background_color: Color = WHITE
    series_colors: tuple[Color, ...] = DEFAULT_SERIES_COLORS
    label_font_size: float = Field(10.0, gt=0)
    title_font_size: float = Field(14.0, gt=0)

    def sized(self, width: float, height: float) -> ChartStyle:
        return self.evolve(width=width, height=height)

    def axis_labels(self, x_label: str, y_label: str) -> ChartStyle:
        return self.evolve(x_axis_label=x_label, y_axis_label=y_label)

    def hide_legend(self) -> ChartStyle:
        return self.evolve(show_legend=False)

    @classmethod
    def bar_chart(cls, title: str) -> ChartStyle:
        return cls(chart_type=ChartType.BAR_VERTICAL, title=title)

    @classmethod
    def pie_chart(cls, title: str) -> ChartStyle:
        return cls(chart_type=ChartType.PIE, title=title, width=350, height=300)

    @classmethod
    def line_chart(cls, title: str) -> ChartStyle:
        return cls(chart_type=ChartType.LINE, title=title)

    @classmethod
    def area_chart(cls, title: str) -> ChartStyle:
        return cls(chart_type=ChartType.AREA, title=title)

    @classmethod
    def small(cls) -> ChartStyle:
        return cls(width=250, height=200)

    @classmethod
    def medium(cls) -> ChartStyle:
        return cls(width=400, height=300)

    @classmethod
    def large(cls) -> ChartStyle:
        return cls(width=550, height=400)
