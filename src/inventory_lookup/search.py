"""Incremental company/product search over loaded rows."""

from __future__ import annotations

from collections.abc import Iterable

from inventory_lookup.models import Row
from inventory_lookup.utils import squash


def normalize_term(value: object, *, strip_internal_whitespace: bool = True) -> str:
    """Comparison form of *value*: lowercase, trimmed, optionally space-free."""
    if value is None:
        return ""
    if strip_internal_whitespace:
        return squash(value)
    return str(value).strip().lower()


def search(
    rows: Iterable[Row],
    query: str,
    *,
    strip_internal_whitespace: bool = True,
    limit: int | None = None,
) -> list[Row]:
    """Return rows whose company or product contains *query*, in load order.

    An empty query matches nothing.
    """
    if limit is not None and (isinstance(limit, bool) or limit <= 0):
        raise ValueError("limit must be a positive integer or None")
    q = normalize_term(query, strip_internal_whitespace=strip_internal_whitespace)
    if not q:
        return []

    def _norm(value: str) -> str:
        return normalize_term(value, strip_internal_whitespace=strip_internal_whitespace)

    matches: list[Row] = []
    for row in rows:
        if q in _norm(row.company) or q in _norm(row.product):
            matches.append(row)
            if limit is not None and len(matches) >= limit:
                break
    return matches
