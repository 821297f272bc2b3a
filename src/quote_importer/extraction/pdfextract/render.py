"""Page rendering for the PDF mapping UI."""

from dataclasses import dataclass

import fitz

from quote_importer.errors import PdfParseError


@dataclass
class RenderedPage:
    png: bytes
    page_index: int
    width_px: int
    height_px: int
    render_scale: float
    page_width_pt: float
    page_height_pt: float


def render_page_png(pdf_bytes: bytes, page_index: int = 0, render_scale: float = 2.0) -> RenderedPage:
    """Render one page to PNG.

    The caller needs ``height_px`` and ``render_scale`` to convert the areas
    the operator draws back to point space.

    Args:
        pdf_bytes: PDF content
        page_index: Zero-based page index
        render_scale: Pixels per point

    Returns:
        RenderedPage with the PNG bytes and its geometry

    Raises:
        PdfParseError: If the PDF cannot be opened
        IndexError: If the page does not exist
        ValueError: If ``render_scale`` is not positive
    """
    if render_scale <= 0:
        raise ValueError(f"render_scale must be positive, got {render_scale}")
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise PdfParseError(f"Failed to open PDF: {e}") from e

    try:
        if not 0 <= page_index < len(doc):
            raise IndexError(f"Page {page_index} out of range (document has {len(doc)} pages)")
        page = doc[page_index]
        pixmap = page.get_pixmap(matrix=fitz.Matrix(render_scale, render_scale), alpha=False)
        return RenderedPage(
            png=pixmap.tobytes("png"),
            page_index=page_index,
            width_px=pixmap.width,
            height_px=pixmap.height,
            render_scale=render_scale,
            page_width_pt=page.rect.width,
            page_height_pt=page.rect.height,
        )
    finally:
        doc.close()
