"""Drag-rectangle mapping over a rendered PDF page."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from quote_importer.errors import SessionStateError
from quote_importer.extraction.pdfextract.models import PixelArea
from quote_importer.mapping.models import PDF_FIELDS, AreaLocation, MappingField, SessionState
from quote_importer.mapping.session import MappingSession

Point = Tuple[float, float]


class PdfMappingSession(MappingSession):
    """
    Mapping session where each capture is a rectangle dragged on the page image.

    Each field holds one area. Releasing the drag stores the normalized
    rectangle and selects the next unmapped field, or returns to idle once
    every field is mapped.
    """

    kind = "pdf"

    def __init__(
        self,
        page_index: int = 0,
        render_scale: float = 2.0,
        fields: Sequence[MappingField] = PDF_FIELDS,
    ):
        if render_scale <= 0:
            raise ValueError(f"render_scale must be positive, got {render_scale}")
        super().__init__(fields)
        self.page_index = page_index
        self.render_scale = render_scale
        self._drag_start: Optional[Point] = None
        self._drag_current: Optional[Point] = None

    @property
    def is_dragging(self) -> bool:
        return self._drag_start is not None

    @property
    def live_rectangle(self) -> Optional[PixelArea]:
        """Rectangle under the pointer while dragging, corners normalized."""
        if self._drag_start is None or self._drag_current is None:
            return None
        (x1, y1), (x2, y2) = self._drag_start, self._drag_current
        return PixelArea(x1, y1, x2, y2).normalized()

    def begin_drag(self, x: float, y: float) -> None:
        self._ensure_open()
        if self._state is not SessionState.FIELD_SELECTED:
            raise SessionStateError("Select a field before drawing an area")
        self._drag_start = (x, y)
        self._drag_current = (x, y)

    def update_drag(self, x: float, y: float) -> None:
        self._ensure_open()
        if self._drag_start is None:
            raise SessionStateError("No drag in progress")
        self._drag_current = (x, y)

    def end_drag(self, x: float, y: float) -> PixelArea:
        """
        Release the drag and store the area for the selected field.

        Returns:
            PixelArea: The normalized rectangle that was stored.

        Raises:
            SessionStateError: If no drag is in progress.
        """
        self.update_drag(x, y)
        area = self.live_rectangle
        self._drag_start = None
        self._drag_current = None

        self._locations[self._selected] = [
            AreaLocation(area=area, page=self.page_index, render_scale=self.render_scale)
        ]
        self._advance()
        return area

    def cancel_drag(self) -> None:
        self._drag_start = None
        self._drag_current = None

    def _select(self, key: Optional[str]) -> None:
        self.cancel_drag()
        super()._select(key)
