"""PDF text extraction with position data."""

import re
from pathlib import Path
from typing import Union
from urllib.parse import unquote

import fitz

from quote_importer.errors import PdfParseError
from quote_importer.extraction.pdfextract.models import PageInfo, PdfDocument, TextRecord
from quote_importer.logging_config import get_logger

logger = get_logger(__name__)

_PERCENT_ESCAPE_RE = re.compile(r"%[0-9A-Fa-f]{2}")


def decode_payload(text: str) -> str:
    """Decode percent-escaped text runs.

    Some producers store text URL-encoded. Decoding is strict: a malformed
    escape leaves the raw text in place and logs a warning.

    Args:
        text: Raw span text

    Returns:
        Decoded text, or the raw text when decoding fails
    """
    if not _PERCENT_ESCAPE_RE.search(text):
        return text
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError:
        logger.warning("Keeping undecodable percent-escaped text %r", text)
        return text


def parse_pdf(pdf_input: Union[bytes, str]) -> PdfDocument:
    """Extract every text span with page-relative coordinates.

    Coordinates are returned in PDF point space with the origin at the bottom
    left: ``x`` is the span's left edge and ``y`` its baseline measured from
    the bottom of the page.

    Args:
        pdf_input: PDF as bytes or file path string

    Returns:
        PdfDocument with page geometry and text records

    Raises:
        FileNotFoundError: If PDF file not found (when path provided)
        PdfParseError: If the PDF cannot be opened
    """
    if not isinstance(pdf_input, (bytes, bytearray)) and not Path(pdf_input).exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_input}")

    try:
        if isinstance(pdf_input, (bytes, bytearray)):
            doc = fitz.open(stream=bytes(pdf_input), filetype="pdf")
        else:
            doc = fitz.open(pdf_input)
    except (RuntimeError, ValueError) as e:
        raise PdfParseError(f"Failed to open PDF: {e}") from e

    pages = []
    records = []
    try:
        for page_num in range(len(doc)):
            page = doc[page_num]
            height = page.rect.height
            pages.append(PageInfo(index=page_num, width=page.rect.width, height=height))
            text_dict = page.get_text("dict")

            for block in text_dict.get("blocks", []):
                if block.get("type") != 0:
                    continue

                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        text = decode_payload(span.get("text", "")).strip()
                        if not text:
                            continue

                        bbox = tuple(span.get("bbox", (0, 0, 0, 0)))
                        origin = span.get("origin", (bbox[0], bbox[3]))
                        records.append(
                            TextRecord(
                                text=text,
                                x=bbox[0],
                                y=height - origin[1],
                                page=page_num,
                                bbox=bbox,
                            )
                        )
    finally:
        doc.close()

    logger.info("Parsed PDF: %d pages, %d text records", len(pages), len(records))
    return PdfDocument(pages=pages, records=records)
