"""Data models for PDF extraction."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class TextRecord:
    """One positioned text run in PDF point space (origin bottom-left)."""

    text: str
    x: float
    y: float
    page: int
    bbox: Optional[tuple] = None  # (x0, y0, x1, y1) in top-left page space


@dataclass
class PageInfo:
    """Page geometry in points, as read from the PDF."""

    index: int
    width: float
    height: float


@dataclass
class PdfDocument:
    """Parsed PDF: page geometry plus every text record."""

    pages: List[PageInfo]
    records: List[TextRecord] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def page(self, index: int) -> PageInfo:
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page {index} out of range (document has {len(self.pages)} pages)")
        return self.pages[index]

    def records_on(self, page: int) -> List[TextRecord]:
        return [record for record in self.records if record.page == page]


@dataclass
class TextLine:
    """Records sharing one baseline, ordered left to right."""

    page: int
    y: float
    records: List[TextRecord]

    @property
    def text(self) -> str:
        return " ".join(record.text for record in self.records)


@dataclass(frozen=True)
class PixelArea:
    """Rectangle in rendered-image pixels (origin top-left)."""

    x1: float
    y1: float
    x2: float
    y2: float

    def normalized(self) -> "PixelArea":
        return PixelArea(
            x1=min(self.x1, self.x2),
            y1=min(self.y1, self.y2),
            x2=max(self.x1, self.x2),
            y2=max(self.y1, self.y2),
        )


@dataclass(frozen=True)
class PointArea:
    """Rectangle in PDF points (origin bottom-left), bounds inclusive."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


@dataclass
class GuessedLineItem:
    """Line item inferred from raw text; confidence is low by construction."""

    item_name: str
    spec: str
    quantity: float
    unit: str
    unit_price: float
    amount: float
    wholesale_price: Optional[float] = None
    source_line: str = ""
    source: str = "heuristic"
