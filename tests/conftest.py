from __future__ import annotations

import io
import zipfile
from collections.abc import Callable, Sequence

import pytest
from openpyxl import Workbook

HEADER = ["업체명", "상품명", "입고수량", "유통기한", "보관장"]


def build_workbook(rows: Sequence[Sequence[object]], *, title: str = "재고") -> bytes:
    """Serialize *rows* (header first) as a one-sheet xlsx workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def replace_member(data: bytes, member: str, payload: bytes = b"<not xml") -> bytes:
    """Return a copy of workbook *data* with one zip member overwritten."""
    buf = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(buf, "w") as dst:
        for item in src.infolist():
            dst.writestr(item, payload if item.filename == member else src.read(item.filename))
    return buf.getvalue()


@pytest.fixture
def workbook_bytes() -> Callable[..., bytes]:
    return build_workbook


@pytest.fixture
def sample_bytes() -> bytes:
    return build_workbook(
        [
            HEADER,
            ["Acme Foods", "Milk", 15, "2024-05-01", "A1"],
            ["Best Co", "Acme Juice", " 20 ", 45000, "B2"],
            [None, None, 3, None, None],
            ["Cold Chain", "Frozen Peas", None, "until sold", "C 3"],
        ]
    )
