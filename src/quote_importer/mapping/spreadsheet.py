"""Cell-click mapping over a workbook preview."""

from __future__ import annotations

from typing import Optional, Sequence

from quote_importer.errors import SessionStateError
from quote_importer.extraction.spreadsheet.workbook import Workbook, parse_ref
from quote_importer.utils import cell_to_str
from quote_importer.mapping.models import SPREADSHEET_FIELDS, CellLocation, MappingField, SessionState
from quote_importer.mapping.session import MappingSession


class SpreadsheetMappingSession(MappingSession):
    """
    Mapping session where each capture is a cell click.

    Single-select fields hold one cell: a new click replaces it and the
    session moves on to the next unmapped field. Multi-select fields collect
    cells (dates or terms split over several cells) and stay selected.
    Clicking a captured cell again removes it.
    """

    kind = "spreadsheet"

    def __init__(
        self,
        workbook: Optional[Workbook] = None,
        fields: Sequence[MappingField] = SPREADSHEET_FIELDS,
    ):
        super().__init__(fields)
        self._workbook = workbook

    def capture_cell(self, sheet: str, ref: str) -> bool:
        """
        Capture a clicked cell for the selected field.

        Args:
            sheet: Sheet name of the clicked cell.
            ref: A1 reference of the clicked cell.

        Returns:
            bool: ``True`` if the cell was added, ``False`` if it was removed
            or ignored (empty cell).

        Raises:
            SessionStateError: If no field is selected or the session ended.
            ValueError: If ``ref`` is not a valid cell reference.
        """
        self._ensure_open()
        if self._state is not SessionState.FIELD_SELECTED:
            raise SessionStateError("Select a field before capturing a cell")
        parse_ref(ref)

        location = CellLocation(sheet=sheet, ref=ref.strip().upper())
        key = self._selected
        captured = self._locations[key]

        if location in captured:
            captured.remove(location)
            return False
        if self._workbook is not None and not cell_to_str(self._workbook.cell(sheet, location.ref)).strip():
            return False

        if self._fields[key].multi_select:
            captured.append(location)
        else:
            self._locations[key] = [location]
            self._advance()
        return True

    def field_value(self, key: str) -> str:
        """Captured cell texts of ``key`` joined with a space, for display."""
        if self._workbook is None:
            return ""
        texts = [
            cell_to_str(self._workbook.cell(loc.sheet, loc.ref)).strip() for loc in self.locations(key)
        ]
        return " ".join(text for text in texts if text)
