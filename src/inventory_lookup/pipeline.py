"""Ingestion pipeline — workbook bytes to normalized rows, no side effects."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, time
from typing import Any, cast

import pandas as pd

from inventory_lookup import FIELDS
from inventory_lookup.config import LookupOptions
from inventory_lookup.io import read_first_sheet
from inventory_lookup.models import LoadReport, Row
from inventory_lookup.utils import sha256_bytes, squash, utcnow_iso

logger = logging.getLogger(__name__)

# ── Header resolution ───────────────────────────────────────────


def resolve_header(headers: Sequence[object], aliases: Iterable[str]) -> str | None:
    """Return the sheet header that *aliases* selects, or ``None``.

    Aliases are tried in priority order. For each one an exact header
    match wins, then a case/whitespace-insensitive one.
    """
    names = [str(h) for h in headers]
    for alias in aliases:
        if alias in names:
            return alias
        wanted = squash(alias)
        for name in names:
            if squash(name) == wanted:
                return name
    return None


def resolve_headers(
    headers: Sequence[object], aliases: Mapping[str, Sequence[str]]
) -> dict[str, str | None]:
    """Resolve every logical field against the sheet's headers."""
    return {name: resolve_header(headers, aliases.get(name, ())) for name in FIELDS}


# ── Value coercion ───────────────────────────────────────────────


def to_text(value: object) -> str:
    """Render a cell value as trimmed text; missing values become ``""``."""
    if value is None:
        return ""
    try:
        if pd.isna(cast(Any, value)):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    return str(value).strip()


# ── Main ingestion functions ────────────────────────────────────


def normalize_records(
    frame: pd.DataFrame, options: LookupOptions | None = None
) -> tuple[tuple[Row, ...], LoadReport]:
    """Turn a raw sheet frame into rows according to *options*.

    Returns ``(rows, report)``.  Fully blank sheet rows are not records and
    are not counted.
    """
    options = options or LookupOptions()
    frame = frame.dropna(how="all")
    report = LoadReport(rows_in=len(frame), rows_out=len(frame), dropped_rows=0)

    columns = resolve_headers(list(frame.columns), options.aliases)
    missing = [name for name, header in columns.items() if header is None]
    if missing:
        report.missing_fields = missing
        report.warnings.append(f"No header found for: {', '.join(missing)}")
    logger.info(
        "Resolved headers: %s",
        ", ".join(f"{name}={header!r}" for name, header in columns.items()),
    )

    # Headers may repeat or be non-strings; index by position.
    labels = [str(c) for c in frame.columns]
    positions = {
        name: labels.index(header) for name, header in columns.items() if header is not None
    }

    rows: list[Row] = []
    for record in frame.itertuples(index=False, name=None):
        values = {name: to_text(record[pos]) for name, pos in positions.items()}
        row = Row(**values)
        if options.drop_blank_rows and row.is_blank():
            continue
        rows.append(row)

    report.rows_out = len(rows)
    report.dropped_rows = report.rows_in - report.rows_out
    if report.dropped_rows:
        report.warnings.append(
            f"Dropped {report.dropped_rows} rows without company, product or storage bin"
        )
        logger.info("Dropped %d blank rows", report.dropped_rows)
    return tuple(rows), report


def ingest(
    data: bytes, options: LookupOptions | None = None, *, source: str = ""
) -> tuple[tuple[Row, ...], LoadReport]:
    """Parse workbook *data* and return ``(rows, report)``.

    Raises
    ------
    ParseError
        If *data* is not a readable workbook or has no sheets.
    """
    sheet_name, frame = read_first_sheet(data)
    rows, report = normalize_records(frame, options)
    report.sheet_name = sheet_name
    report.source = source
    report.sha256 = sha256_bytes(data)
    report.loaded_at_utc = utcnow_iso()
    logger.info("Loaded %d rows from sheet %r", report.rows_out, sheet_name)
    return rows, report
