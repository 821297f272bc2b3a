"""Line-click mapping over linearized PDF text."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from quote_importer.errors import SessionStateError
from quote_importer.logging_config import get_logger
from quote_importer.mapping.models import (
    REQUIRED_TEXT_FIELDS,
    TEXT_FIELDS,
    LineLocation,
    MappingField,
    MappingSet,
    SessionState,
)
from quote_importer.mapping.session import MappingSession

logger = get_logger(__name__)


class TextMappingSession(MappingSession):
    """
    Mapping session where each capture is a click on one text line.

    Customer and subject hold a single line; the other fields collect lines
    (a date or terms split over several lines). Clicking a captured line
    again removes it. Lines can be corrected in place: captures follow the
    edit because they point at the line, not at its old text.
    """

    kind = "text"

    def __init__(
        self,
        lines: Sequence[str],
        fields: Sequence[MappingField] = TEXT_FIELDS,
        required: Sequence[str] = REQUIRED_TEXT_FIELDS,
    ):
        super().__init__(fields)
        for key in required:
            self._field(key)
        self._lines: List[str] = list(lines)
        self._required: Tuple[str, ...] = tuple(required)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def _line(self, index: int) -> str:
        if not 0 <= index < len(self._lines):
            raise IndexError(f"Line {index} out of range (0-{len(self._lines) - 1})")
        return self._lines[index]

    def capture_line(self, index: int) -> bool:
        """
        Capture a clicked line for the selected field.

        Returns:
            bool: ``True`` if the line was added, ``False`` if it was removed
            or ignored (blank line).

        Raises:
            SessionStateError: If no field is selected or the session ended.
            IndexError: If ``index`` is not a line of the document.
        """
        self._ensure_open()
        if self._state is not SessionState.FIELD_SELECTED:
            raise SessionStateError("Select a field before capturing a line")
        text = self._line(index).strip()

        key = self._selected
        captured = self._locations[key]
        for location in captured:
            if location.index == index:
                captured.remove(location)
                return False
        if not text:
            return False

        location = LineLocation(index=index, text=text)
        if self._fields[key].multi_select:
            captured.append(location)
        else:
            self._locations[key] = [location]
            self._advance()
        return True

    def edit_line(self, index: int, text: str) -> None:
        """
        Replace the text of line ``index``; captures of that line take the new text.

        Raises:
            ValueError: If the new text is blank.
        """
        self._ensure_open()
        self._line(index)
        text = text.strip()
        if not text:
            raise ValueError("A line cannot be edited to blank text")
        self._lines[index] = text
        for key in self._order:
            self._locations[key] = [
                LineLocation(index=index, text=text) if location.index == index else location
                for location in self._locations[key]
            ]

    def field_value(self, key: str) -> str:
        """Captured line texts of ``key`` joined with a space."""
        return " ".join(location.text for location in self.locations(key))

    @property
    def missing_required(self) -> List[str]:
        return [key for key in self._required if not self._locations[key]]

    def complete(self) -> MappingSet:
        """
        Finish the session once every required field holds a line.

        Raises:
            SessionStateError: Naming the required fields still empty; the
                session stays open.
        """
        missing = self.missing_required
        if missing:
            self._ensure_open()
            labels = ", ".join(self._fields[key].label for key in missing)
            raise SessionStateError(f"Map these fields before continuing: {labels}")
        return super().complete()
