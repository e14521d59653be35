"""Lookup session — load status, current rows, query and selection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Literal

from inventory_lookup.config import LookupOptions, Variant, options_for
from inventory_lookup.errors import FetchError, InventoryLookupError, ParseError
from inventory_lookup.models import LoadReport, Row
from inventory_lookup.pipeline import ingest
from inventory_lookup.search import search

logger = logging.getLogger(__name__)

Status = Literal["idle", "loading", "ready", "error"]


class InventorySession:
    """State behind one lookup screen.

    Rows are replaced wholesale by each successful load. A load is
    identified by the token returned from :meth:`begin_load`; outcomes
    for any token other than the latest are discarded.
    """

    def __init__(
        self,
        options: LookupOptions | None = None,
        variant: Variant | str = Variant.auto,
    ) -> None:
        self.variant = Variant(variant)
        self.options = options if options is not None else options_for(self.variant)
        self.status: Status = "idle"
        self.message = ""
        self.rows: tuple[Row, ...] = ()
        self.report: LoadReport | None = None
        self.query = ""
        self.selected: Row | None = None
        self._generation = 0

    # ── Loading ──────────────────────────────────────────────────

    def begin_load(self) -> int:
        self._generation += 1
        self.status = "loading"
        self.message = "Loading data…"
        self.selected = None
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def finish_load(self, token: int, rows: Sequence[Row], report: LoadReport) -> bool:
        if not self.is_current(token):
            logger.info("Discarding superseded load #%d", token)
            return False
        self.rows = tuple(rows)
        self.report = report
        self.status = "ready"
        self.message = f"Loaded {len(self.rows)} rows"
        return True

    def fail_load(self, token: int, exc: InventoryLookupError) -> bool:
        if not self.is_current(token):
            logger.info("Discarding failure of superseded load #%d", token)
            return False
        keep = isinstance(exc, ParseError) and self.options.retain_rows_on_parse_error
        if not keep:
            self.rows = ()
            self.report = None
        self.status = "error"
        if isinstance(exc, FetchError):
            self.message = f"Load failed: {exc}"
        else:
            self.message = f"Could not read the spreadsheet: {exc}"
        logger.warning("%s (rows kept: %s)", self.message, keep)
        return True

    def load(self, reader: Callable[[], bytes], *, source: str = "") -> bool:
        """Read bytes with *reader*, ingest them and apply the outcome.

        Returns True when the load succeeded and was applied.
        """
        token = self.begin_load()
        try:
            data = reader()
            rows, report = ingest(data, self.options, source=source)
        except (FetchError, ParseError) as exc:
            self.fail_load(token, exc)
            return False
        except Exception as exc:
            self.fail_load(token, ParseError(f"Unexpected error: {exc}"))
            raise
        return self.finish_load(token, rows, report)

    def reset(self) -> None:
        """Forget the loaded data and any query."""
        self._generation += 1
        self.status = "idle"
        self.message = ""
        self.rows = ()
        self.report = None
        self.query = ""
        self.selected = None

    # ── Searching ────────────────────────────────────────────────

    @property
    def search_enabled(self) -> bool:
        if self.status == "ready":
            return True
        return self.status == "error" and bool(self.rows)

    @property
    def results(self) -> list[Row]:
        if not self.search_enabled:
            return []
        return search(
            self.rows,
            self.query,
            strip_internal_whitespace=self.options.strip_internal_whitespace,
            limit=self.options.limit,
        )

    def set_query(self, query: str) -> list[Row]:
        self.query = query
        self.selected = None
        return self.results

    def select(self, index: int) -> Row:
        """Select the result at zero-based *index*."""
        results = self.results
        if not 0 <= index < len(results):
            raise IndexError(f"No result #{index + 1} (have {len(results)})")
        self.selected = results[index]
        return self.selected

    def clear_selection(self) -> None:
        self.selected = None
