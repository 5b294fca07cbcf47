"""
Tests for the style models — presets, immutable customisation and validation.
"""

import pytest
from pydantic import ValidationError

from report_engine.models.styles import (
    BorderStyle,
    ChartStyle,
    ChartType,
    ErrorCorrection,
    ImageStyle,
    LineStyle,
    QRCodeStyle,
    ScaleMode,
    TableStyle,
    TextStyle,
    WatermarkPosition,
    WatermarkStyle,
)


class TestImmutability:
    def test_styles_are_frozen(self):
        style = TextStyle()
        with pytest.raises(ValidationError):
            style.font_size = 20

    def test_evolve_returns_copy(self):
        base = TableStyle.minimal()
        custom = base.with_border(BorderStyle.DASHED, width=2)
        assert custom.border_style is BorderStyle.DASHED
        assert custom.border_width == 2
        assert base.border_style is BorderStyle.SOLID
        assert base.border_width == 0.5

    def test_evolve_validates(self):
        with pytest.raises(ValidationError):
            TextStyle().evolve(font_size=-3)


class TestValidation:
    def test_unknown_color(self):
        with pytest.raises(ValidationError):
            TextStyle(text_color="not-a-colour")

    @pytest.mark.parametrize("color", ["#336699", "gray", "#ABC"])
    def test_accepted_colors(self, color):
        assert TextStyle(text_color=color).text_color == color

    @pytest.mark.parametrize("given, expected", [(-0.5, 0.0), (0.4, 0.4), (3, 1.0)])
    def test_opacity_clamped(self, given, expected):
        assert WatermarkStyle(opacity=given).opacity == expected

    def test_negative_padding(self):
        with pytest.raises(ValidationError):
            TableStyle(padding=-1)


class TestTextStyle:
    def test_leading(self):
        assert TextStyle(font_size=10).leading == pytest.approx(12)

    def test_presets(self):
        assert TextStyle.title().font_size == 18
        assert TextStyle.boxed().draw_border
        assert TextStyle.highlighted("#FFFF00").background_color == "#FFFF00"

    def test_border_helpers(self):
        style = TextStyle().with_border("#FF0000", 2).without_border()
        assert not style.draw_border
        assert style.border_color == "#FF0000"


class TestTableStyle:
    @pytest.mark.parametrize("border, dash", [
        (BorderStyle.SOLID, None),
        (BorderStyle.DASHED, [5.0, 3.0]),
        (BorderStyle.DOTTED, [1.0, 2.0]),
        (BorderStyle.NONE, None),
    ])
    def test_dash_pattern(self, border, dash):
        assert TableStyle(border_style=border).dash_pattern == dash

    def test_borders_visible(self):
        assert TableStyle().borders_visible
        assert not TableStyle.modern().borders_visible
        assert not TableStyle(border_width=0).borders_visible

    def test_row_color_alternates_from_base(self):
        style = TableStyle()
        assert [style.row_color(i) for i in range(3)] == [
            style.row_background, style.alternate_row_color, style.row_background,
        ]

    def test_row_color_disabled(self):
        style = TableStyle.minimal()
        assert style.row_color(1) == style.row_background

    def test_colorful_lightens_alternate(self):
        style = TableStyle.colorful("#FF8C00")
        assert style.header_background == "#FF8C00"
        assert style.alternate_row_color == "#FFFFC8"

    def test_column_ratios(self):
        assert TableStyle().with_column_ratios(1, 2, 1).column_ratios == (1, 2, 1)
        assert TableStyle().with_column_ratios().column_ratios is None


class TestLineStyle:
    def test_dashed_pattern(self):
        assert LineStyle().dashed(4, 2).dash_pattern == [4, 2]

    def test_dotted_pattern(self):
        assert LineStyle.dotted_line().dash_pattern == [1.0, 3.0]

    def test_solid_has_no_pattern(self):
        assert LineStyle.thick().dash_pattern is None


class TestImageStyle:
    @pytest.mark.parametrize("mode, expected", [
        (ScaleMode.ORIGINAL, (400, 100)),
        (ScaleMode.FIT_WIDTH, (200, 50)),
        (ScaleMode.FIT_HEIGHT, (600, 150)),
        (ScaleMode.STRETCH, (200, 150)),
        (ScaleMode.FIT_BOX, (200, 50)),
    ])
    def test_scaled_size(self, mode, expected):
        style = ImageStyle(width=200, height=150, scale_mode=mode)
        assert style.scaled_size(400, 100) == pytest.approx(expected)

    def test_fit_box_limited_by_height(self):
        assert ImageStyle(width=200, height=150).scaled_size(100, 300) == pytest.approx((50, 150))


class TestCodeAndChartStyles:
    def test_qr_presets(self):
        assert QRCodeStyle.high_quality().error_correction is ErrorCorrection.HIGH
        assert QRCodeStyle.compact().margin == 0
        assert QRCodeStyle.small().sized(120).size == 120

    def test_watermark_tiled(self):
        style = WatermarkStyle.draft().tiled(150)
        assert style.position is WatermarkPosition.TILED
        assert (style.tile_spacing_x, style.tile_spacing_y) == (150, 200)
        assert style.text == "DRAFT"

    def test_watermark_image_keeps_bytes(self):
        style = WatermarkStyle().with_image(b"\x89PNG")
        assert style.image == b"\x89PNG"

    def test_chart_presets(self):
        pie = ChartStyle.pie_chart("Share")
        assert pie.chart_type is ChartType.PIE
        assert (pie.width, pie.height) == (350, 300)
        assert ChartStyle.large().hide_legend().show_legend is False
