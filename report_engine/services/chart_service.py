"""
Chart Service – matplotlib charts rendered to PNG and placed as images.

Category data (series x category -> value) is pivoted with pandas so every
chart type can read one tidy frame; pie and donut charts take label/value
pairs.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Mapping, Sequence, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from report_engine.exceptions import LayoutError, layout_step
from report_engine.models.styles import ChartStyle, ChartType
from report_engine.services.canvas_service import Canvas
from report_engine.services.paginator import Paginator

logger = logging.getLogger(__name__)

CHART_SPACING = 10.0
RENDER_DPI = 150
POINTS_PER_INCH = 72.0
DEFAULT_SERIES = "Series 1"


@dataclass(frozen=True)
class CategoryPoint:
    """One value of a bar/line/area chart."""
    series: str
    category: str
    value: float


@dataclass(frozen=True)
class PiePoint:
    """One slice of a pie/donut chart."""
    label: str
    value: float


ChartData = Sequence[Union[CategoryPoint, PiePoint]]


def category_points(series: str, data: Mapping[str, float]) -> list[CategoryPoint]:
    return [CategoryPoint(series, str(category), float(value)) for category, value in data.items()]


def pie_points(data: Mapping[str, float]) -> list[PiePoint]:
    return [PiePoint(str(label), float(value)) for label, value in data.items()]


def category_frame(points: Sequence[CategoryPoint]) -> pd.DataFrame:
    """Rows are categories (first-seen order), columns are series."""
    frame = pd.DataFrame([(p.series, p.category, p.value) for p in points],
                         columns=["series", "category", "value"])
    categories = list(dict.fromkeys(frame["category"]))
    series = list(dict.fromkeys(frame["series"]))
    pivot = frame.pivot_table(index="category", columns="series", values="value", aggfunc="sum")
    return pivot.reindex(index=categories, columns=series).fillna(0.0)


class ChartService:
    """Renders :class:`ChartStyle` charts and places them on the page."""

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_png(self, data: ChartData, style: ChartStyle | None = None) -> bytes:
        """PNG bytes whose aspect ratio matches ``style.width x style.height``."""
        style = style or ChartStyle()
        if not data:
            raise LayoutError("Chart data must not be empty", operation="chart")

        fig, ax = plt.subplots(
            figsize=(style.width / POINTS_PER_INCH, style.height / POINTS_PER_INCH),
            facecolor=style.background_color,
        )
        try:
            if style.chart_type in (ChartType.PIE, ChartType.DONUT):
                self._draw_pie(ax, self._pie_data(data), style)
            else:
                self._draw_categories(ax, category_frame(self._category_data(data)), style)

            if style.title:
                ax.set_title(style.title, fontsize=style.title_font_size, fontweight="bold")
            fig.tight_layout(pad=0.5)

            buf = io.BytesIO()
            fig.savefig(buf, format="png", dpi=RENDER_DPI,
                        facecolor=style.background_color, edgecolor="none")
            return buf.getvalue()
        except LayoutError:
            raise
        except Exception as exc:
            raise LayoutError(f"Chart rendering failed: {exc}", operation="chart") from exc
        finally:
            plt.close(fig)

    @staticmethod
    def _category_data(data: ChartData) -> list[CategoryPoint]:
        points = []
        for item in data:
            if isinstance(item, CategoryPoint):
                points.append(item)
            elif isinstance(item, PiePoint):
                points.append(CategoryPoint(DEFAULT_SERIES, item.label, item.value))
            else:
                raise LayoutError(f"Unsupported chart point: {item!r}", operation="chart")
        return points

    @staticmethod
    def _pie_data(data: ChartData) -> list[PiePoint]:
        points = []
        for item in data:
            if isinstance(item, PiePoint):
                points.append(item)
            elif isinstance(item, CategoryPoint):
                points.append(PiePoint(item.category, item.value))
            else:
                raise LayoutError(f"Unsupported chart point: {item!r}", operation="chart")
        if sum(p.value for p in points) <= 0:
            raise LayoutError("Pie chart values must sum to a positive number", operation="chart")
        return points

    def _draw_categories(self, ax, frame: pd.DataFrame, style: ChartStyle) -> None:
        colors = _cycle(style.series_colors, len(frame.columns))
        categories = list(frame.index)
        positions = np.arange(len(categories))
        chart_type = style.chart_type

        if chart_type in (ChartType.BAR_VERTICAL, ChartType.BAR_HORIZONTAL):
            count = len(frame.columns)
            bar = 0.8 / count
            for i, (series, color) in enumerate(zip(frame.columns, colors)):
                offsets = positions - 0.4 + bar * (i + 0.5)
                if chart_type is ChartType.BAR_HORIZONTAL:
                    ax.barh(offsets, frame[series].to_numpy(), height=bar, color=color, label=series)
                else:
                    ax.bar(offsets, frame[series].to_numpy(), width=bar, color=color, label=series)
        elif chart_type is ChartType.STACKED_BAR:
            bottom = np.zeros(len(categories))
            for series, color in zip(frame.columns, colors):
                values = frame[series].to_numpy()
                ax.bar(positions, values, bottom=bottom, width=0.6, color=color, label=series)
                bottom += values
        elif chart_type is ChartType.LINE:
            for series, color in zip(frame.columns, colors):
                ax.plot(positions, frame[series].to_numpy(), marker="o", color=color, label=series)
        elif chart_type is ChartType.AREA:
            for series, color in zip(frame.columns, colors):
                ax.fill_between(positions, frame[series].to_numpy(), color=color, alpha=0.6, label=series)

        if chart_type is ChartType.BAR_HORIZONTAL:
            ax.set_yticks(positions, categories, fontsize=style.label_font_size)
            ax.grid(axis="x", color="#D3D3D3", linewidth=0.5)
            x_label, y_label = style.y_axis_label, style.x_axis_label
        else:
            ax.set_xticks(positions, categories, fontsize=style.label_font_size)
            ax.grid(axis="y", color="#D3D3D3", linewidth=0.5)
            x_label, y_label = style.x_axis_label, style.y_axis_label
        ax.set_axisbelow(True)
        ax.set_facecolor("white")
        if x_label:
            ax.set_xlabel(x_label, fontsize=style.label_font_size)
        if y_label:
            ax.set_ylabel(y_label, fontsize=style.label_font_size)
        if style.show_legend:
            ax.legend(fontsize=style.label_font_size, frameon=False)

    @staticmethod
    def _draw_pie(ax, points: list[PiePoint], style: ChartStyle) -> None:
        labels = [p.label for p in points]
        wedge = {"width": 0.4} if style.chart_type is ChartType.DONUT else None
        wedges, *_ = ax.pie(
            [p.value for p in points],
            labels=labels if style.show_labels else None,
            colors=_cycle(style.series_colors, len(points)),
            autopct="%1.1f%%" if style.show_labels else None,
            startangle=90,
            counterclock=False,
            wedgeprops=wedge,
            textprops={"fontsize": style.label_font_size},
        )
        ax.axis("equal")
        if style.show_legend:
            ax.legend(wedges, labels, fontsize=style.label_font_size, frameon=False,
                      loc="center left", bbox_to_anchor=(1.0, 0.5))

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def draw_chart(
        self,
        canvas: Canvas,
        data: ChartData,
        x: float,
        y: float,
        style: ChartStyle | None = None,
    ) -> None:
        """Bottom-left corner at (*x*, *y*)."""
        style = style or ChartStyle()
        png = self.render_png(data, style)
        canvas.draw_image(png, x, y, style.width, style.height)

    def insert_chart(
        self,
        paginator: Paginator,
        data: ChartData,
        style: ChartStyle | None = None,
    ) -> float:
        """Centered at the cursor; shrunk to the usable width/height if larger."""
        style = style or ChartStyle()
        with layout_step("insert_chart", paginator):
            png = self.render_png(data, style)
            width, height = style.width, style.height
            scale = min(1.0, paginator.usable_width / width,
                        (paginator.usable_height - CHART_SPACING) / height)
            if scale < 1.0:
                logger.warning("Chart %.0fx%.0fpt does not fit the page; scaling by %.2f",
                               width, height, scale)
                width, height = width * scale, height * scale

            needed = height + CHART_SPACING
            paginator.check_space(needed)
            x = paginator.start_x + (paginator.usable_width - width) / 2
            paginator.canvas.draw_image(png, x, paginator.current_y - height, width, height)
            paginator.advance_y(needed)
            return needed


def _cycle(colors: Sequence[str], count: int) -> list[str]:
    return [colors[i % len(colors)] for i in range(count)]
