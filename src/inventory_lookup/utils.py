"""Shared helpers — hashing, timestamps, etc."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone

_WHITESPACE_RE = re.compile(r"\s+")


def sha256_bytes(data: bytes) -> str:
    """Return the hex SHA-256 digest of *data*."""
    return hashlib.sha256(data).hexdigest()


def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def squash(value: object) -> str:
    """Lowercase, trim and remove every whitespace run."""
    return _WHITESPACE_RE.sub("", str(value).strip().lower())
