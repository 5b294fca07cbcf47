"""
Tests for DecorationService — watermarks and page numbers applied when the
document is saved.
"""

import pytest

from report_engine.exceptions import LayoutError
from report_engine.models.styles import WatermarkPosition, WatermarkStyle
from report_engine.services.decoration_service import DecorationService, PageNumberDecorator


@pytest.fixture
def decorations():
    return DecorationService()


def two_pages(document):
    for _ in range(2):
        document.open_page(612, 792)


class TestPageNumbers:
    def test_page_of_total(self, decorations, document):
        two_pages(document)
        decorations.add_page_numbers(document)
        document.save()
        assert [p.texts() for p in document.pages] == [["Page 1 of 2"], ["Page 2 of 2"]]

    def test_right_aligned_at_bottom(self, decorations, document):
        two_pages(document)
        decorations.add_page_numbers(document)
        document.save()
        (op,) = document.pages[0].of_kind("text")
        # 11 glyphs x 4.5pt at 9pt
        assert op["x"] == pytest.approx(612 - 50 - 49.5)
        assert op["y"] == 30

    def test_simple_format(self, decorations, document):
        two_pages(document)
        decorations.add_simple_page_numbers(document)
        document.save()
        assert document.pages[1].texts() == ["2"]

    def test_label(self):
        assert PageNumberDecorator("{page}/{total}").label(3, 7) == "3/7"


class TestWatermark:
    def test_default_is_confidential(self, decorations, document):
        two_pages(document)
        decorations.add_watermark(document)
        document.save()
        for page in document.pages:
            (op,) = page.of_kind("text")
            assert op["text"] == "CONFIDENTIAL"
            assert op["rotation"] == 45
            assert op["opacity"] == pytest.approx(0.2)

    @pytest.mark.parametrize("position, y", [
        (WatermarkPosition.DIAGONAL, 396),
        (WatermarkPosition.CENTER, 396),
        (WatermarkPosition.TOP, 742),
        (WatermarkPosition.BOTTOM, 50),
    ])
    def test_positions(self, decorations, document, position, y):
        document.open_page(612, 792)
        decorations.add_watermark(document, WatermarkStyle.draft().evolve(position=position))
        document.save()
        (op,) = document.pages[0].of_kind("text")
        # "DRAFT" at 60pt: 5 x 30pt wide
        assert op["x"] == pytest.approx((612 - 150) / 2)
        assert op["y"] == y

    def test_tiled(self, decorations, document):
        document.open_page(612, 792)
        decorations.add_watermark(document, WatermarkStyle.sample().tiled())
        document.save()
        ops = document.pages[0].of_kind("text")
        assert len(ops) == 12
        assert (ops[0]["x"], ops[0]["y"]) == (50, 50)

    def test_image_watermark(self, decorations, document, png_bytes):
        document.open_page(612, 792)
        decorations.add_watermark(document, WatermarkStyle().with_image(png_bytes))
        document.save()
        (op,) = document.pages[0].of_kind("image")
        assert (op["x"], op["y"]) == (286, 386)

    def test_image_watermark_requires_data(self, decorations, document):
        with pytest.raises(LayoutError):
            decorations.add_watermark(document, WatermarkStyle(watermark_type="image"))

    def test_watermark_and_numbers_together(self, decorations, document):
        two_pages(document)
        decorations.add_watermark(document)
        decorations.add_page_numbers(document)
        document.save()
        assert document.pages[1].texts() == ["CONFIDENTIAL", "Page 2 of 2"]
