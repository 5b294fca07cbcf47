"""
Tests for TextFlowService — wrapping, box drawing and paginated writing.

The recording canvas advances 0.5 x font size per glyph, so at 10pt every
character is 5pt wide.
"""

import logging

import pytest

from report_engine.exceptions import LayoutError
from report_engine.models.styles import TextAlign, TextStyle, VerticalAlign
from report_engine.services.canvas_service import Font

FONT = Font("Helvetica", 10)


@pytest.fixture
def canvas(paginator):
    return paginator.canvas


@pytest.fixture
def box_style():
    return TextStyle(font_size=10, padding=5)


class TestWrap:
    def test_greedy_lines(self, text_flow, canvas):
        lines = text_flow.wrap_lines(canvas, "aaaa bbbb cccc", 45, FONT)
        assert lines == ["aaaa bbbb", "cccc"]

    def test_exact_width_fits(self, text_flow, canvas):
        # 9 glyphs x 5pt == 45pt
        assert text_flow.wrap_lines(canvas, "aaaa bbbb", 45, FONT) == ["aaaa bbbb"]
        assert text_flow.wrap_lines(canvas, "aaaa bbbb", 44.9, FONT) == ["aaaa", "bbbb"]

    def test_overlong_word_gets_own_line(self, text_flow, canvas):
        lines = text_flow.wrap_lines(canvas, "a supercalifragilistic b", 30, FONT)
        assert lines == ["a", "supercalifragilistic", "b"]

    def test_newlines_split_paragraphs(self, text_flow, canvas):
        lines = text_flow.wrap_lines(canvas, "first line\nsecond", 500, FONT)
        assert lines == ["first line", "second"]

    def test_collapses_whitespace(self, text_flow, canvas):
        assert text_flow.wrap_lines(canvas, "  a   b  ", 500, FONT) == ["a b"]

    @pytest.mark.parametrize("text", ["", None, "   "])
    def test_empty_text(self, text_flow, canvas, text):
        assert text_flow.wrap_lines(canvas, text, 100, FONT) == []

    def test_wrap_is_lazy(self, text_flow, canvas):
        lines = text_flow.wrap(canvas, "one two three", 20, FONT)
        assert next(lines) == "one"

    @pytest.mark.parametrize("width", [20, 37.5, 60, 123])
    def test_rewrap_is_idempotent(self, text_flow, canvas, width):
        text = "the quick brown fox jumps over the lazy dog while a very long word sits"
        lines = text_flow.wrap_lines(canvas, text, width, FONT)
        assert text_flow.wrap_lines(canvas, " ".join(lines), width, FONT) == lines


class TestMeasurement:
    def test_box_height(self, text_flow, canvas, box_style):
        # 2 lines x 12pt leading + 2 x 5pt padding
        assert text_flow.box_height(canvas, "aaaa bbbb cccc", 55, box_style) == pytest.approx(34)

    def test_box_height_min(self, text_flow, canvas, box_style):
        assert text_flow.box_height(canvas, "hi", 100, box_style, min_height=50) == 50

    def test_box_height_empty(self, text_flow, canvas, box_style):
        assert text_flow.box_height(canvas, "", 100, box_style, min_height=50) == 0


class TestDrawBox:
    def test_top_left(self, text_flow, canvas, box_style):
        height = text_flow.draw_box(canvas, "hello world", 50, 700, 200, 0, box_style)
        assert height == pytest.approx(22)
        (op,) = canvas.of_kind("text")
        assert (op["x"], op["y"]) == (55, 685)

    def test_center_and_right(self, text_flow, canvas, box_style):
        text_flow.draw_box(canvas, "hello world", 50, 700, 200, 0,
                           box_style.evolve(text_align=TextAlign.CENTER))
        text_flow.draw_box(canvas, "hello world", 50, 700, 200, 0,
                           box_style.evolve(text_align=TextAlign.RIGHT))
        centered, right = canvas.of_kind("text")
        # line width 11 x 5 = 55
        assert centered["x"] == pytest.approx(122.5)
        assert right["x"] == pytest.approx(190)

    def test_vertical_alignment(self, text_flow, canvas, box_style):
        text_flow.draw_box(canvas, "hi", 50, 700, 200, 100,
                           box_style.evolve(vertical_align=VerticalAlign.MIDDLE))
        text_flow.draw_box(canvas, "hi", 50, 700, 200, 100,
                           box_style.evolve(vertical_align=VerticalAlign.BOTTOM))
        middle, bottom = canvas.of_kind("text")
        assert middle["y"] == pytest.approx(646)
        assert bottom["y"] == pytest.approx(607)

    def test_grows_to_fit(self, text_flow, canvas, box_style):
        assert text_flow.draw_box(canvas, "alpha bravo charlie", 50, 700, 40, 10, box_style) == pytest.approx(46)

    def test_clip_drops_lines(self, text_flow, canvas, box_style, caplog):
        with caplog.at_level(logging.WARNING):
            height = text_flow.draw_box(canvas, "alpha bravo charlie", 50, 700, 40, 20,
                                        box_style, clip=True)
        assert height == 20
        assert canvas.texts() == ["alpha"]
        assert "2 of 3 lines dropped" in caplog.text

    @pytest.mark.parametrize("align", [VerticalAlign.MIDDLE, VerticalAlign.BOTTOM])
    def test_clipped_alignment_keeps_first_line(self, text_flow, canvas, box_style, align):
        text_flow.draw_box(canvas, "alpha bravo charlie", 50, 700, 40, 20,
                           box_style.evolve(vertical_align=align), clip=True)
        (alpha,) = canvas.of_kind("text")
        assert alpha["text"] == "alpha"
        # same slot as a top-aligned box: 700 - padding 5 - font 10
        assert alpha["y"] == pytest.approx(685)

    def test_border_and_background(self, text_flow, canvas):
        style = TextStyle.boxed().with_background("#EEEEEE")
        height = text_flow.draw_box(canvas, "boxed", 50, 700, 200, 0, style)
        (fill,) = canvas.of_kind("fill")
        (border,) = canvas.of_kind("stroke_rect")
        assert fill["color"] == "#EEEEEE"
        assert border["y"] == pytest.approx(700 - height)
        # fill, border, then text
        assert [op.kind for op in canvas.ops] == ["fill", "stroke_rect", "text"]

    def test_empty_draws_nothing(self, text_flow, canvas):
        assert text_flow.draw_box(canvas, "", 50, 700, 200, 40, TextStyle.boxed()) == 0
        assert canvas.ops == []


class TestWriteText:
    def test_single_line(self, text_flow, paginator):
        used = text_flow.write_text(paginator, "Hello")
        assert used == pytest.approx(14.4)
        (op,) = paginator.canvas.of_kind("text")
        assert op["y"] == 730
        assert paginator.current_y == pytest.approx(727.6)

    def test_paragraph_kept_together(self, text_flow, paginator, document):
        paginator.advance_y(662)
        text_flow.write_text(paginator, "one\ntwo\nthree")
        assert paginator.page_count == 2
        assert document.pages[0].texts() == []
        assert document.pages[1].texts() == ["one", "two", "three"]

    def test_long_text_flows_across_pages(self, text_flow, paginator, document):
        text = "\n".join(f"line {i}" for i in range(60))
        used = text_flow.write_text(paginator, text)
        assert used == pytest.approx(60 * 14.4)
        assert len(document.pages) == 2
        assert len(document.pages[0].texts()) == 48
        assert document.pages[1].texts()[0] == "line 48"

    def test_empty(self, text_flow, paginator):
        assert text_flow.write_text(paginator, "") == 0
        assert paginator.current_y == 742


class TestWriteTextBox:
    def test_box_at_cursor(self, text_flow, paginator):
        used = text_flow.write_text_box(paginator, "hello")
        # boxed preset: 12pt font, 10pt padding
        assert used == pytest.approx(34.4)
        (border,) = paginator.canvas.of_kind("stroke_rect")
        assert border["y"] == pytest.approx(742 - 34.4)
        assert paginator.current_y == pytest.approx(742 - 34.4)

    def test_breaks_before_box(self, text_flow, paginator):
        paginator.advance_y(680)
        text_flow.write_text_box(paginator, "hello")
        assert paginator.page_count == 2

    def test_oversized_box_is_clipped(self, text_flow, paginator, caplog):
        text = "\n".join(f"row {i}" for i in range(100))
        with caplog.at_level(logging.WARNING):
            used = text_flow.write_text_box(paginator, text)
        assert used == 692
        assert paginator.page_count == 1
        assert "clipping" in caplog.text

    @pytest.mark.parametrize("align", [VerticalAlign.MIDDLE, VerticalAlign.BOTTOM])
    def test_oversized_aligned_box_stays_on_page(self, text_flow, paginator, align):
        text = "\n".join(f"row {i}" for i in range(100))
        text_flow.write_text_box(paginator, text, TextStyle.boxed().evolve(vertical_align=align))
        lines = paginator.canvas.of_kind("text")
        assert lines[0]["text"] == "row 0"
        # 742 - padding 10 - font 12
        assert lines[0]["y"] == pytest.approx(720)
        assert all(50 <= op["y"] <= 720 for op in lines)

    def test_custom_width(self, text_flow, paginator):
        text_flow.write_text_box(paginator, "hello", width=100)
        (border,) = paginator.canvas.of_kind("stroke_rect")
        assert border["width"] == 100

    def test_failure_is_wrapped(self, text_flow, paginator, monkeypatch):
        def broken(*args, **kwargs):
            raise OSError("font metrics unavailable")

        monkeypatch.setattr(paginator.canvas, "measure_text", broken)
        with pytest.raises(LayoutError) as excinfo:
            text_flow.write_text(paginator, "hello world")
        assert excinfo.value.operation == "write_text"
        assert excinfo.value.page_index == 0
