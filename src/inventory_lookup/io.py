"""I/O helpers — fetch workbook bytes, read the first sheet, write JSON artifacts."""

from __future__ import annotations

import io
import json
import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd
import requests
from openpyxl.utils.exceptions import InvalidFileException

from inventory_lookup.errors import FetchError, ParseError
from inventory_lookup.models import Row

logger = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
FETCH_TIMEOUT_SECONDS = 15.0

# ── Fetching ─────────────────────────────────────────────────────


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_bytes(url: str, timeout: float = FETCH_TIMEOUT_SECONDS) -> bytes:
    """GET *url* and return the body.

    Raises
    ------
    FetchError
        On a network failure or a non-success status.
    """
    try:
        response = requests.get(url, timeout=timeout, headers={"Cache-Control": "no-store"})
    except requests.RequestException as exc:
        raise FetchError(f"Could not fetch {url}: {exc}") from exc
    if not response.ok:
        raise FetchError(f"Could not fetch {url}: HTTP {response.status_code}")
    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return response.content


def read_file_bytes(path: Path) -> bytes:
    """Read a user-selected workbook file.

    Raises
    ------
    FetchError
        If *path* does not exist or cannot be read.
    ParseError
        If the suffix is not an xlsx-family extension.
    """
    path = Path(path)
    if not path.exists():
        raise FetchError(f"Input file not found: {path}")
    if path.is_dir():
        raise FetchError(f"Input path is a directory, not a file: {path}")
    suffix = path.suffix.lower()
    if suffix not in WORKBOOK_SUFFIXES:
        raise ParseError(f"Unsupported file type: {suffix!r}. Use .xlsx")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FetchError(f"Cannot read {path}: {exc}") from exc


def read_source(source: str | Path) -> bytes:
    """Return workbook bytes from a URL or a local path."""
    if isinstance(source, str) and is_url(source):
        return fetch_bytes(source)
    return read_file_bytes(Path(source))


# ── Workbook decoding ────────────────────────────────────────────


def read_first_sheet(data: bytes) -> tuple[str, pd.DataFrame]:
    """Decode *data* as a workbook and return ``(sheet_name, frame)``.

    The first sheet by position is used; its first row is the header.
    Cell values keep their native Python types (``dtype=object``).
    """
    try:
        with pd.ExcelFile(io.BytesIO(data), engine="openpyxl") as book:
            sheet_names = [str(name) for name in book.sheet_names]
            if not sheet_names:
                raise ParseError("Workbook contains no sheets")
            frame = book.parse(book.sheet_names[0], header=0, dtype=object)
    except ParseError:
        raise
    except (
        zipfile.BadZipFile, InvalidFileException, KeyError, ValueError, OSError,
        SyntaxError,  # malformed XML part (ElementTree or lxml)
    ) as exc:
        raise ParseError(f"Could not read workbook ({type(exc).__name__}: {exc})") from exc
    return sheet_names[0], frame


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Row):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path


def write_rows(path: Path, rows: Iterable[Row]) -> Path:
    """Write *rows* as a JSON list of records."""
    return write_json(path, list(rows))
