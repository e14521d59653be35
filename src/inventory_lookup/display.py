"""Display helpers — expiry/quantity labels and rich renderables for rows."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import date, timedelta

from rich.console import Group
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from inventory_lookup.models import Row

# ── Labels ───────────────────────────────────────────────────────

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ISO_DATETIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})[ T]\d{2}:\d{2}(:\d{2}(\.\d+)?)?$")

# 1900 date system: serial 1 is 1900-01-01 and serial 60 is the phantom
# 1900-02-29, so from serial 61 on the offset from 1899-12-30 is exact.
SERIAL_EPOCH = date(1899, 12, 30)
SERIAL_MIN = 20000
SERIAL_MAX = 90000
_SECONDS_PER_DAY = 86400

EMPTY_LABEL = "-"


def serial_to_date(serial: float) -> date:
    """Convert a 1900-system serial day number (> 60) to a calendar date.

    A time fraction within 1e-4 s of midnight rounds up to the next day.
    """
    days = math.floor(serial)
    seconds = _SECONDS_PER_DAY * (serial - days)
    whole = math.floor(seconds)
    if seconds - whole > 0.9999:
        whole += 1
    if whole >= _SECONDS_PER_DAY:
        days += 1
    return SERIAL_EPOCH + timedelta(days=days)


def _as_number(text: str) -> float | None:
    if "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def format_expiry(value: str | None) -> str:
    """Render an expiry cell as ``YYYY-MM-DD`` when it is a date, else verbatim."""
    text = str(value if value is not None else "").strip()
    if not text:
        return EMPTY_LABEL
    if ISO_DATE_RE.match(text):
        return text
    stamp = ISO_DATETIME_RE.match(text)
    if stamp:
        return stamp.group(1)
    number = _as_number(text)
    if number is not None and SERIAL_MIN < number < SERIAL_MAX:
        return serial_to_date(number).isoformat()
    return text


def quantity_label(value: str | None) -> str:
    text = str(value if value is not None else "").strip()
    return text if text else "0"


def bin_label(value: str | None) -> str:
    text = str(value if value is not None else "").strip()
    return text if text else EMPTY_LABEL


# ── Renderables ──────────────────────────────────────────────────


def status_line(status: str, row_count: int) -> str:
    if status == "ready":
        return f"{row_count} rows"
    if status == "loading":
        return "loading"
    if status == "error":
        return "error"
    return "no data"


def result_cards(rows: Sequence[Row], *, start: int = 1) -> RichTable:
    """Result list: one line per row with the storage bin shown prominently."""
    tbl = RichTable(show_lines=True, title=f"{len(rows)} results")
    tbl.add_column("#", justify="right", style="dim")
    tbl.add_column("Company")
    tbl.add_column("Product", style="bold")
    tbl.add_column("Bin", justify="center", style="bold reverse")
    tbl.add_column("Incoming", justify="right")
    tbl.add_column("Expiry")
    for idx, row in enumerate(rows, start=start):
        tbl.add_row(
            str(idx),
            row.company,
            row.product,
            bin_label(row.storage_bin),
            quantity_label(row.incoming_quantity),
            format_expiry(row.expiry),
        )
    return tbl


def detail_panel(row: Row) -> Panel:
    """Detail view for one selected row."""
    bin_text = Text(bin_label(row.storage_bin), style="bold", justify="center")
    facts = RichTable.grid(padding=(0, 2))
    facts.add_column(style="bold")
    facts.add_column()
    facts.add_row("Company", row.company)
    facts.add_row("Product", row.product)
    facts.add_row("Incoming", quantity_label(row.incoming_quantity))
    facts.add_row("Expiry", format_expiry(row.expiry))
    return Panel(Group(bin_text, Text(""), facts), title="Storage bin", border_style="green")
