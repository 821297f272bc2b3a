"""Group positioned text records into reading-order lines."""

from itertools import groupby
from typing import Iterable, List

from quote_importer.extraction.pdfextract.models import PdfDocument, TextLine, TextRecord

DEFAULT_LINE_TOLERANCE = 0.5


def group_lines(records: Iterable[TextRecord], tolerance: float = DEFAULT_LINE_TOLERANCE) -> List[TextLine]:
    """Cluster records of one or more pages into lines.

    Records are read top to bottom (descending point-space y) and left to right.
    A record joins the current line when its y is within ``tolerance`` of the
    previous record's y.

    Args:
        records: Text records
        tolerance: Baseline tie band in points

    Returns:
        Lines in reading order, each sorted by x
    """
    ordered = sorted(records, key=lambda r: (r.page, -r.y, r.x))
    lines: List[TextLine] = []
    previous = None

    for record in ordered:
        if (
            previous is not None
            and record.page == previous.page
            and abs(record.y - previous.y) <= tolerance
        ):
            lines[-1].records.append(record)
        else:
            lines.append(TextLine(page=record.page, y=record.y, records=[record]))
        previous = record

    for line in lines:
        line.records.sort(key=lambda r: r.x)
    return lines


def linearize(records: Iterable[TextRecord], tolerance: float = DEFAULT_LINE_TOLERANCE) -> List[str]:
    """Render records as text lines, one blank line between pages.

    Args:
        records: Text records, possibly from several pages
        tolerance: Baseline tie band in points

    Returns:
        Line strings in reading order
    """
    output: List[str] = []
    lines = group_lines(records, tolerance)
    for index, (_, page_lines) in enumerate(groupby(lines, key=lambda line: line.page)):
        if index > 0:
            output.append("")
        output.extend(line.text for line in page_lines)
    return output


def document_text(document: PdfDocument, tolerance: float = DEFAULT_LINE_TOLERANCE) -> str:
    """Full linearized text of a parsed document."""
    return "\n".join(linearize(document.records, tolerance))
