"""Lookup configuration — header aliases and the two page presets."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from inventory_lookup import FIELDS

# Ordered: the first alias that matches a sheet header wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "company": ("업체명", "업체", "회사명", "제조사"),
    "product": ("상품명", "품명", "제품명", "상품"),
    "incoming_quantity": ("입고수량", "입고예정수량", "수량", "입고"),
    "expiry": ("유통기한", "유통", "기한", "소비기한"),
    "storage_bin": ("보관장", "보관위치", "위치", "로케이션", "진열"),
}

AUTO_RESULT_LIMIT = 120
DEFAULT_SOURCE = "data.xlsx"


class Variant(str, Enum):
    auto = "auto"
    upload = "upload"


@dataclass(frozen=True)
class LookupOptions:
    """Ingestion and search policy shared by a session."""

    drop_blank_rows: bool = True
    strip_internal_whitespace: bool = True
    limit: int | None = None
    retain_rows_on_parse_error: bool = False
    aliases: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(FIELD_ALIASES))

    def __post_init__(self) -> None:
        if self.limit is not None and (isinstance(self.limit, bool) or self.limit <= 0):
            raise ValueError("limit must be a positive integer or None")
        unknown = sorted(set(self.aliases) - set(FIELDS))
        if unknown:
            raise ValueError(f"Unknown field(s) in aliases: {', '.join(unknown)}")

    def replace(self, **changes: object) -> LookupOptions:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    def with_aliases(self, extra: Mapping[str, list[str]]) -> LookupOptions:
        """Return a copy whose aliases try *extra* first, then the current ones."""
        if not extra:
            return self
        merged = {name: tuple(self.aliases.get(name, ())) for name in FIELDS}
        for name, labels in extra.items():
            if name not in merged:
                raise ValueError(f"Unknown field {name!r}. Use one of: {', '.join(FIELDS)}")
            kept = [label for label in merged[name] if label not in labels]
            merged[name] = tuple(labels) + tuple(kept)
        return self.replace(aliases=merged)


PRESETS: dict[Variant, LookupOptions] = {
    Variant.auto: LookupOptions(
        drop_blank_rows=True,
        strip_internal_whitespace=True,
        limit=AUTO_RESULT_LIMIT,
        retain_rows_on_parse_error=False,
    ),
    Variant.upload: LookupOptions(
        drop_blank_rows=False,
        strip_internal_whitespace=False,
        limit=None,
        retain_rows_on_parse_error=True,
    ),
}


def options_for(variant: Variant | str) -> LookupOptions:
    return PRESETS[Variant(variant)]


# ── Alias entries (--alias / --profile) ──────────────────────────


def _normalize_field_name(name: str) -> str:
    return "_".join(name.strip().lower().split())


def parse_alias_entries(raw: Iterable[str] | None) -> dict[str, list[str]]:
    """Parse ``field=Header`` entries into ``{field: [Header, ...]}``.

    Later entries for the same field are tried after earlier ones.
    """
    aliases: dict[str, list[str]] = {}
    for item in raw or []:
        if "=" not in item:
            raise ValueError(f"Invalid alias: {item!r}  (expected field=Header)")
        target, label = item.split("=", 1)
        target = _normalize_field_name(target)
        label = label.strip()
        if not target or not label:
            raise ValueError("Alias entries must have a non-empty field and header (field=Header)")
        if target not in FIELDS:
            raise ValueError(f"Unknown field {target!r}. Use one of: {', '.join(FIELDS)}")
        labels = aliases.setdefault(target, [])
        if label not in labels:
            labels.append(label)
    return aliases


def load_alias_profile(profile: Path | None) -> list[str]:
    """Return the ``field=Header`` lines of a profile file."""
    if not profile:
        return []
    if not profile.exists():
        raise ValueError(f"Profile not found: {profile} (expected lines like company=Vendor)")
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines
