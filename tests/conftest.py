"""
Shared fixtures — an in-memory document that records every drawing call.

``RecordingCanvas.measure_text`` uses a fixed advance per glyph
(``GLYPH_WIDTH`` x font size), so wrapping results are exact and easy to
reason about in assertions.
"""

import io
from dataclasses import dataclass, field

import pytest
from PIL import Image

from report_engine.models.geometry import PageGeometry
from report_engine.services.paginator import Paginator
from report_engine.services.table_layout_service import TableLayoutService
from report_engine.services.text_flow_service import TextFlowService

GLYPH_WIDTH = 0.5


@dataclass
class Op:
    kind: str
    args: dict = field(default_factory=dict)

    def __getitem__(self, key):
        return self.args[key]


class RecordingCanvas:
    def __init__(self, width, height, index):
        self.width = width
        self.height = height
        self.index = index
        self.ops: list[Op] = []
        self.closed = False
        self.fail_on_close = False

    def _record(self, kind, **args):
        self.ops.append(Op(kind, args))

    def draw_text(self, x, y, text, font, color, *, rotation=0.0, opacity=1.0):
        self._record("text", x=x, y=y, text=text, font=font, color=color,
                     rotation=rotation, opacity=opacity)

    def measure_text(self, text, font):
        return len(text) * font.size * GLYPH_WIDTH

    def fill_rect(self, x, y, width, height, color):
        self._record("fill", x=x, y=y, width=width, height=height, color=color)

    def stroke_rect(self, x, y, width, height, color, thickness, dash=None):
        self._record("stroke_rect", x=x, y=y, width=width, height=height,
                     color=color, thickness=thickness, dash=dash)

    def stroke_line(self, x1, y1, x2, y2, color, thickness, dash=None):
        self._record("line", x1=x1, y1=y1, x2=x2, y2=y2,
                     color=color, thickness=thickness, dash=dash)

    def draw_image(self, data, x, y, width, height, opacity=1.0):
        self._record("image", x=x, y=y, width=width, height=height, opacity=opacity)

    def image_size(self, data):
        with Image.open(io.BytesIO(data)) as img:
            return float(img.width), float(img.height)

    def draw_graphic(self, drawing, x, y, opacity=1.0):
        self._record("graphic", drawing=drawing, x=x, y=y, opacity=opacity)

    def close(self):
        if self.fail_on_close:
            raise OSError("content stream already released")
        self.closed = True

    # -- assertion helpers ------------------------------------------------

    def of_kind(self, kind):
        return [op for op in self.ops if op.kind == kind]

    def texts(self):
        return [op["text"] for op in self.of_kind("text")]


class RecordingDocument:
    def __init__(self):
        self.pages: list[RecordingCanvas] = []
        self.decorators = []
        self.saved = False

    def open_page(self, width, height):
        page = RecordingCanvas(width, height, len(self.pages))
        self.pages.append(page)
        return page

    def add_page_decorator(self, decorator):
        self.decorators.append(decorator)

    def save(self):
        total = len(self.pages)
        for number, page in enumerate(self.pages, start=1):
            for decorator in self.decorators:
                decorator(page, number, total)
        self.saved = True
        return b"%PDF-recorded"


def make_png(width=40, height=20, color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def document():
    return RecordingDocument()


@pytest.fixture
def geometry():
    # 612 x 792 with 50pt margins: usable 512 x 692, start_y 742, min_y 50
    return PageGeometry.letter()


@pytest.fixture
def paginator(geometry, document):
    with Paginator(geometry, document) as p:
        yield p


@pytest.fixture
def text_flow():
    return TextFlowService()


@pytest.fixture
def tables(text_flow):
    return TableLayoutService(text_flow)


@pytest.fixture
def png_bytes():
    return make_png()
