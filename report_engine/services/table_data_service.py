"""
Table Data Service – turns DataFrames and record objects into table rows.

The result is the list-of-rows shape the table layout service renders:
row 0 holds the column labels, every cell is a string.
"""

from __future__ import annotations

import dataclasses
import math
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from pydantic import BaseModel

from report_engine.exceptions import TableDataError

DATE_FORMAT = "%d/%m/%Y"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def humanize(name: str) -> str:
    """``serial_number`` / ``serialNumber`` -> ``Serial Number``."""
    spaced = _CAMEL_BOUNDARY.sub(" ", str(name)).replace("_", " ")
    return " ".join(part.capitalize() for part in spaced.split())


def format_cell(value: Any) -> str:
    """Render one value the way report tables show it."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "Yes" if value else "No"
    if isinstance(value, pd.Timestamp):
        return "" if pd.isna(value) else value.strftime(DATETIME_FORMAT)
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return "" if math.isnan(value) else f"{float(value):.2f}"
    return str(value)


# ---------------------------------------------------------------------------
# pandas
# ---------------------------------------------------------------------------

def table_from_dataframe(
    df: pd.DataFrame,
    include_index: bool = False,
    index_label: str | None = None,
) -> list[list[str]]:
    """
    Header from the column labels, one table row per DataFrame row.

    Multi-level column labels are joined with spaces; NaN/NaT become empty
    cells.
    """
    if df.columns.empty:
        raise TableDataError("DataFrame has no columns")
    if include_index:
        df = df.reset_index()
        if index_label:
            df = df.rename(columns={df.columns[0]: index_label})

    header = [
        " ".join(str(part) for part in col) if isinstance(col, tuple) else str(col)
        for col in df.columns
    ]
    body = [
        [format_cell(None if _is_missing(value) else value) for value in row]
        for row in df.itertuples(index=False, name=None)
    ]
    return [header, *body]


def _is_missing(value: Any) -> bool:
    if isinstance(value, (list, tuple, dict, set, np.ndarray)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def table_from_records(
    records: Iterable[Any],
    fields: Sequence[str] | None = None,
    labels: Mapping[str, str] | None = None,
) -> list[list[str]]:
    """
    Rows from dataclasses, pydantic models or mappings.

    Columns come from *fields* or, by default, from the first record;
    labels default to the humanised field names.
    """
    rows = [_as_mapping(record) for record in records]
    if fields is None:
        if not rows:
            raise TableDataError("Cannot infer columns from an empty record list")
        fields = list(rows[0].keys())
    if not fields:
        raise TableDataError("Records have no fields")

    labels = labels or {}
    header = [labels.get(name, humanize(name)) for name in fields]
    body = [[format_cell(row.get(name)) for name in fields] for row in rows]
    return [header, *body]


def _as_mapping(record: Any) -> Mapping[str, Any]:
    if isinstance(record, BaseModel):
        return {name: getattr(record, name) for name in type(record).model_fields}
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return {f.name: getattr(record, f.name) for f in dataclasses.fields(record)}
    if isinstance(record, Mapping):
        return record
    raise TableDataError(f"Unsupported record type: {type(record).__name__}")
