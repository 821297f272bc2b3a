"""Pixel-to-point area conversion and area text lookup."""

from typing import Iterable, List

from quote_importer.extraction.pdfextract.models import PageInfo, PixelArea, PointArea, TextRecord


def page_height_px(page: PageInfo, render_scale: float) -> float:
    """Rendered height in pixels of ``page`` at ``render_scale``."""
    return page.height * render_scale


def to_point_area(area: PixelArea, render_scale: float, page_height_px: float) -> PointArea:
    """Convert a rendered-image rectangle to PDF point space.

    Pixel space has its origin at the top left, point space at the bottom
    left, so y is inverted against the rendered page height.

    Args:
        area: Rectangle in rendered pixels (corners in any order)
        render_scale: Pixels per point used when rendering
        page_height_px: Height of the rendered page in pixels

    Returns:
        PointArea with inclusive bounds

    Raises:
        ValueError: If ``render_scale`` is not positive
    """
    if render_scale <= 0:
        raise ValueError(f"render_scale must be positive, got {render_scale}")
    area = area.normalized()
    return PointArea(
        x_min=area.x1 / render_scale,
        x_max=area.x2 / render_scale,
        y_min=(page_height_px - area.y2) / render_scale,
        y_max=(page_height_px - area.y1) / render_scale,
    )


def records_in_area(records: Iterable[TextRecord], page: int, area: PointArea) -> List[TextRecord]:
    """Records of ``page`` whose anchor lies inside ``area``, in reading order."""
    inside = [r for r in records if r.page == page and area.contains(r.x, r.y)]
    return sorted(inside, key=lambda r: (-r.y, r.x))


def text_in_area(records: Iterable[TextRecord], page: int, area: PointArea) -> str:
    """Space-joined text of the records inside ``area``."""
    return " ".join(r.text for r in records_in_area(records, page, area))
