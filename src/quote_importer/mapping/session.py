"""Coordinate-mapping session state machine shared by both document kinds."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from quote_importer.errors import SessionStateError
from quote_importer.logging_config import get_logger
from quote_importer.mapping.models import FieldStatus, Location, MappingEntry, MappingField, MappingSet, SessionState

logger = get_logger(__name__)


class MappingSession:
    """
    Operator-driven mapping of fields to document locations.

    States: ``IDLE`` (nothing selected), ``FIELD_SELECTED`` (next capture goes
    to the selected field), and the terminal ``COMPLETED`` and ``CANCELLED``.
    Each session owns its state; nothing is shared between sessions.
    """

    kind = "spreadsheet"

    def __init__(self, fields: Sequence[MappingField]):
        if not fields:
            raise ValueError("A mapping session needs at least one field")
        self._fields: Dict[str, MappingField] = {f.key: f for f in fields}
        self._order: List[str] = [f.key for f in fields]
        self._locations: Dict[str, List[Location]] = {key: [] for key in self._order}
        self._selected: Optional[str] = None
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def selected_field(self) -> Optional[str]:
        return self._selected

    @property
    def fields(self) -> List[MappingField]:
        return [self._fields[key] for key in self._order]

    def _ensure_open(self) -> None:
        if self._state in (SessionState.COMPLETED, SessionState.CANCELLED):
            raise SessionStateError(f"Session is {self._state.value}")

    def _field(self, key: str) -> MappingField:
        try:
            return self._fields[key]
        except KeyError:
            raise ValueError(f"Unknown mapping field: {key}") from None

    def _select(self, key: Optional[str]) -> None:
        self._selected = key
        self._state = SessionState.IDLE if key is None else SessionState.FIELD_SELECTED

    def _advance(self) -> None:
        """Select the next unmapped field after the current one, or go idle."""
        start = self._order.index(self._selected) + 1 if self._selected else 0
        for key in self._order[start:] + self._order[:start]:
            if not self._locations[key]:
                self._select(key)
                return
        self._select(None)

    def select_field(self, key: str) -> SessionState:
        """Select ``key``; selecting the already selected field deselects it."""
        self._ensure_open()
        self._field(key)
        self._select(None if self._selected == key else key)
        return self._state

    def deselect(self) -> None:
        self._ensure_open()
        self._select(None)

    def clear_field(self, key: str) -> None:
        self._ensure_open()
        self._field(key)
        self._locations[key] = []

    def reset(self) -> None:
        """Drop every capture and return to idle."""
        self._ensure_open()
        for key in self._order:
            self._locations[key] = []
        self._select(None)

    def field_status(self, key: str) -> FieldStatus:
        self._field(key)
        if self._selected == key:
            return FieldStatus.SELECTED
        if self._locations[key]:
            return FieldStatus.CAPTURED
        return FieldStatus.UNMAPPED

    def captured_count(self, key: str) -> int:
        self._field(key)
        return len(self._locations[key])

    def locations(self, key: str) -> List[Location]:
        self._field(key)
        return list(self._locations[key])

    @property
    def is_fully_mapped(self) -> bool:
        return all(self._locations[key] for key in self._order)

    def complete(self) -> MappingSet:
        """Finish the session; partial mappings are allowed."""
        self._ensure_open()
        entries = [
            MappingEntry(
                field_type=key,
                label=self._fields[key].label,
                location=location,
                ordinal=ordinal,
            )
            for key in self._order
            for ordinal, location in enumerate(self._locations[key])
        ]
        self._selected = None
        self._state = SessionState.COMPLETED
        logger.info("Mapping completed with %d entries over %d fields", len(entries), len({e.field_type for e in entries}))
        return MappingSet(kind=self.kind, entries=entries)

    def cancel(self) -> None:
        """Abandon the session; nothing is produced."""
        self._ensure_open()
        self._selected = None
        self._state = SessionState.CANCELLED
