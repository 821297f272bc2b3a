"""PDF extraction package for quotation import."""

from quote_importer.extraction.pdfextract.models import (
    GuessedLineItem,
    PageInfo,
    PdfDocument,
    PixelArea,
    PointArea,
    TextLine,
    TextRecord,
)

__all__ = [
    "GuessedLineItem",
    "PageInfo",
    "PdfDocument",
    "PixelArea",
    "PointArea",
    "TextLine",
    "TextRecord",
]


def parse_pdf(pdf_input):
    """Parse a PDF into positioned text records (lazy import)."""
    from quote_importer.extraction.pdfextract.parser import parse_pdf as _parse

    return _parse(pdf_input)


def render_page_png(pdf_bytes, page_index=0, render_scale=2.0):
    """Render a page to PNG (lazy import)."""
    from quote_importer.extraction.pdfextract.render import render_page_png as _render

    return _render(pdf_bytes, page_index, render_scale)
