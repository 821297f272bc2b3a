"""Shared fixtures: in-memory workbooks, generated PDFs and a fake store."""

import io
import os
from typing import Any, Dict, List, Optional

# backend.app.main builds its app at import time and needs these.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")

import fitz
import openpyxl
import pytest

from quote_importer.errors import StoreError
from quote_importer.extraction.spreadsheet import Workbook


def build_xlsx(sheets: Dict[str, Dict[str, Any]], merged: Optional[Dict[str, List[str]]] = None) -> bytes:
    """Write ``{sheet: {ref: value}}`` to .xlsx bytes, sheets in the given order."""
    book = openpyxl.Workbook()
    book.remove(book.active)
    for title, cells in sheets.items():
        worksheet = book.create_sheet(title)
        for ref, value in cells.items():
            worksheet[ref] = value
        for rng in (merged or {}).get(title, []):
            worksheet.merge_cells(rng)
    buffer = io.BytesIO()
    book.save(buffer)
    return buffer.getvalue()


def build_workbook(sheets: Dict[str, Dict[str, Any]], merged: Optional[Dict[str, List[str]]] = None) -> Workbook:
    return Workbook.from_bytes(build_xlsx(sheets, merged))


def build_pdf(pages: List[List[tuple]], width: float = 595, height: float = 842) -> bytes:
    """One list of ``(x, baseline_from_top, text)`` per page, ASCII text only."""
    doc = fitz.open()
    for texts in pages:
        page = doc.new_page(width=width, height=height)
        for x, y, text in texts:
            page.insert_text((x, y), text, fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


class FakeStore:
    """In-memory QuotationStore with optional failure injection per table."""

    def __init__(self, customers: Optional[List[Dict[str, Any]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"customers": list(customers or [])}
        self.fail_insert: set = set()
        self.fail_delete: set = set()
        self.calls: List[tuple] = []
        self.last_ilike: Optional[Dict[str, str]] = None
        self._next_id = 100

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def insert(self, table, rows):
        self.calls.append(("insert", table))
        if table in self.fail_insert:
            raise StoreError("insert rejected", table=table)
        written = []
        for row in rows:
            row = dict(row)
            if table == "customers":
                self._next_id += 1
                row["id"] = self._next_id
            self.rows(table).append(row)
            written.append(row)
        return written

    def upsert(self, table, rows, on_conflict):
        self.calls.append(("upsert", table))
        return self.insert(table, rows)

    def select(self, table, filters=None, *, columns="*", ilike=None, limit=None):
        self.calls.append(("select", table))
        if ilike:
            self.last_ilike = dict(ilike)
        result = [
            row for row in self.rows(table)
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        for column, pattern in (ilike or {}).items():
            needle = pattern.strip("%").replace("\\", "").lower()
            result = [row for row in result if needle in str(row.get(column, "")).lower()]
        return result[:limit] if limit is not None else result

    def delete(self, table, filters):
        self.calls.append(("delete", table))
        if table in self.fail_delete:
            raise StoreError("delete rejected", table=table)
        kept = [
            row for row in self.rows(table)
            if not all(row.get(k) == v for k, v in filters.items())
        ]
        removed = len(self.rows(table)) - len(kept)
        self.tables[table] = kept
        return [{}] * removed


@pytest.fixture
def store():
    return FakeStore(customers=[{"id": 1, "name": "株式会社テスト"}])


@pytest.fixture
def default_layout_sheets():
    """Cover, index and details sheets in the standard layout."""
    return {
        "表紙": {
            "D8": "株式会社テスト",
            "C21": "倉庫改修工事",
            "C23": "本社倉庫",
            "C25": "2025年3月末",
            "C31": "月末締め翌月末払い",
            "AN5": 2025,
            "AR5": 3,
            "AU5": 15,
            "G5": "Q-2025-001",
        },
        "目次": {
            "C9": "電気設備",
            "H9": 240000,
            "C10": "空調設備",
            "H10": 294000,
            "C11": "合計",
            "H11": 534000,
        },
        "明細": {
            "B40": "品名",
            "C40": "規格",
            "D40": "単位",
            "E40": "数量",
            "F40": "単価",
            "G40": "金額",
            "B41": "電気設備",
            "B42": "ケーブル",
            "C42": "VVF 2.0",
            "D42": "m",
            "E42": "1,250",
            "F42": 120,
            "G42": 150000,
            "C43": "3芯",
            "B44": "分電盤",
            "D44": "台",
            "E44": 2,
            "F44": 45000,
            "B45": "小計",
            "G45": 240000,
            "B46": "空調設備",
            "B47": "エアコン",
            "D47": "台",
            "E47": 3,
            "F47": 98000,
            "G47": 294000,
            "B48": "合計",
            "G48": 534000,
            "B50": "消費税",
            "G50": 53400,
        },
    }


@pytest.fixture
def default_workbook(default_layout_sheets):
    return build_workbook(default_layout_sheets)
