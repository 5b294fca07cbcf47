"""
Layout Errors – exception taxonomy for the pagination engine.

Every failure raised by the engine derives from :class:`LayoutError` so a
report generator can catch a single type and still know which page and
which operation failed.
"""

from __future__ import annotations

from contextlib import contextmanager


class LayoutError(Exception):
    """Layout failed; carries the page index and operation when known."""

    def __init__(
        self,
        message: str,
        *,
        page_index: int | None = None,
        operation: str | None = None,
    ) -> None:
        self.page_index = page_index
        self.operation = operation
        context = []
        if operation:
            context.append(f"operation={operation}")
        if page_index is not None:
            context.append(f"page={page_index + 1}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class PageConfigurationError(LayoutError, ValueError):
    """Margins leave no usable area on the page."""


class PaginatorClosedError(LayoutError, RuntimeError):
    """A drawing operation was issued after the paginator was closed."""


class TableDataError(LayoutError, ValueError):
    """Ragged rows, empty tables or column ratios that do not match."""


class ResourceReleaseError(LayoutError):
    """The open page drawing context could not be released."""


@contextmanager
def layout_step(operation: str, paginator=None):
    """
    Re-raise collaborator failures (fonts, images, encoders) as
    :class:`LayoutError` tagged with *operation* and the current page.
    """
    try:
        yield
    except LayoutError:
        raise
    except Exception as exc:
        page_index = paginator.page_index if paginator is not None else None
        raise LayoutError(
            f"{operation} failed: {exc}",
            page_index=page_index,
            operation=operation,
        ) from exc
