"""
Page Geometry – immutable page size, margins and orientation.

All values are PDF points. The origin is the bottom-left corner of the
page, so the writable area runs from ``start_y`` (top margin) down to
``min_y`` (bottom margin).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from reportlab.lib.pagesizes import A4, LEGAL, LETTER

from report_engine.exceptions import PageConfigurationError

DEFAULT_MARGIN = 50.0

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "letter": LETTER,
    "a4": A4,
    "legal": LEGAL,
}


@dataclass(frozen=True)
class PageGeometry:
    """Raw page size plus margins; every layout quantity derives from it."""

    raw_width: float = LETTER[0]
    raw_height: float = LETTER[1]
    margin_top: float = DEFAULT_MARGIN
    margin_bottom: float = DEFAULT_MARGIN
    margin_left: float = DEFAULT_MARGIN
    margin_right: float = DEFAULT_MARGIN
    landscape: bool = False

    def __post_init__(self) -> None:
        self.validate()

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def uniform(cls, width: float, height: float, margin: float = DEFAULT_MARGIN) -> PageGeometry:
        return cls(width, height, margin, margin, margin, margin)

    @classmethod
    def named(cls, name: str, margin: float = DEFAULT_MARGIN, landscape: bool = False) -> PageGeometry:
        """Build a geometry from a paper name (``letter``, ``a4``, ``legal``)."""
        try:
            width, height = PAGE_SIZES[name.lower()]
        except KeyError:
            raise PageConfigurationError(f"Unknown page size '{name}'") from None
        return cls(width, height, margin, margin, margin, margin, landscape)

    @classmethod
    def letter(cls) -> PageGeometry:
        return cls.named("letter")

    @classmethod
    def a4(cls) -> PageGeometry:
        return cls.named("a4")

    @classmethod
    def legal(cls) -> PageGeometry:
        return cls.named("legal")

    @classmethod
    def letter_landscape(cls) -> PageGeometry:
        return cls.named("letter", landscape=True)

    @classmethod
    def a4_landscape(cls) -> PageGeometry:
        return cls.named("a4", landscape=True)

    # ------------------------------------------------------------------
    # Copy-on-write modifiers
    # ------------------------------------------------------------------

    def with_margins(
        self,
        top: float,
        bottom: float | None = None,
        left: float | None = None,
        right: float | None = None,
    ) -> PageGeometry:
        """
        Return a copy with new margins.

        One value sets all four sides, two values set (vertical, horizontal).
        """
        if bottom is None:
            bottom = left = right = top
        elif left is None:
            top, bottom, left, right = top, top, bottom, bottom
        elif right is None:
            right = left
        return replace(
            self,
            margin_top=top,
            margin_bottom=bottom,
            margin_left=left,
            margin_right=right,
        )

    def with_landscape(self, landscape: bool = True) -> PageGeometry:
        return replace(self, landscape=landscape)

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    def effective_size(self) -> tuple[float, float]:
        """(width, height) after applying orientation."""
        if self.landscape:
            return self.raw_height, self.raw_width
        return self.raw_width, self.raw_height

    @property
    def effective_width(self) -> float:
        return self.effective_size()[0]

    @property
    def effective_height(self) -> float:
        return self.effective_size()[1]

    def usable_width(self) -> float:
        return self.effective_width - self.margin_left - self.margin_right

    def usable_height(self) -> float:
        return self.effective_height - self.margin_top - self.margin_bottom

    def start_x(self) -> float:
        return self.margin_left

    def start_y(self) -> float:
        return self.effective_height - self.margin_top

    def min_y(self) -> float:
        return self.margin_bottom

    def validate(self) -> None:
        """Raise :class:`PageConfigurationError` for a degenerate page."""
        if self.raw_width <= 0 or self.raw_height <= 0:
            raise PageConfigurationError(
                f"Page size must be positive, got {self.raw_width}x{self.raw_height}"
            )
        margins = (self.margin_top, self.margin_bottom, self.margin_left, self.margin_right)
        if any(m < 0 for m in margins):
            raise PageConfigurationError(f"Margins must not be negative: {margins}")
        if self.usable_width() <= 0 or self.usable_height() <= 0:
            raise PageConfigurationError(
                "Degenerate page: margins leave "
                f"{self.usable_width():.1f}x{self.usable_height():.1f}pt usable"
            )
