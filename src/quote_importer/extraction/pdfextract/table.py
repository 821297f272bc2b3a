"""Row reconstruction from column areas drawn on a PDF page."""

from typing import Dict, List, Mapping, Tuple

from quote_importer.extraction.pdfextract.models import PointArea, TextRecord

DEFAULT_ROW_TOLERANCE = 3.0


def cluster_records_by_y(
    records: List[TextRecord], tolerance: float = DEFAULT_ROW_TOLERANCE
) -> List[Tuple[float, List[TextRecord]]]:
    """Cluster records into rows, top of the page first.

    Args:
        records: Records of a single page
        tolerance: Y-position clustering tolerance in points

    Returns:
        List of (representative y, records in that row)
    """
    if not records:
        return []

    sorted_records = sorted(records, key=lambda r: -r.y)
    clusters = []
    current_y = None
    current_cluster: List[TextRecord] = []

    for record in sorted_records:
        if current_y is None or abs(record.y - current_y) < tolerance:
            if current_y is None:
                current_y = record.y
            current_cluster.append(record)
        else:
            clusters.append((current_y, current_cluster))
            current_y = record.y
            current_cluster = [record]

    if current_cluster:
        clusters.append((current_y, current_cluster))

    return clusters


def extract_column_rows(
    records: List[TextRecord],
    page: int,
    column_areas: Mapping[str, PointArea],
    tolerance: float = DEFAULT_ROW_TOLERANCE,
) -> List[Dict[str, str]]:
    """Split the records under each column area into table rows.

    Every record on ``page`` that falls inside a column area is attributed to
    that column, then records are grouped into rows by y.

    Args:
        records: All document records
        page: Page index the areas were drawn on
        column_areas: Field name to area in point space
        tolerance: Y-position clustering tolerance in points

    Returns:
        One dict per row mapping field name to its text, top row first
    """
    owner: Dict[int, str] = {}
    selected: List[TextRecord] = []
    for record in records:
        if record.page != page:
            continue
        for field_name, area in column_areas.items():
            if area.contains(record.x, record.y):
                owner[id(record)] = field_name
                selected.append(record)
                break

    rows = []
    for _, row_records in cluster_records_by_y(selected, tolerance):
        cells: Dict[str, List[str]] = {}
        for record in sorted(row_records, key=lambda r: r.x):
            cells.setdefault(owner[id(record)], []).append(record.text)
        rows.append({field_name: " ".join(texts) for field_name, texts in cells.items()})
    return rows
