"""API schemas for coordinate mappings submitted by the mapping UI."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from quote_importer.extraction.pdfextract.models import PixelArea
from quote_importer.mapping.models import (
    REQUIRED_TEXT_FIELDS,
    TEXT_FIELDS,
    AreaLocation,
    CellLocation,
    LineLocation,
    MappingEntry,
    MappingSet,
    field_catalogue,
)


class CellPayload(BaseModel):
    sheet: str = Field(min_length=1)
    ref: str = Field(min_length=2, max_length=10)


class AreaPayload(BaseModel):
    x1: float
    y1: float
    x2: float
    y2: float
    page: int = Field(default=0, ge=0)
    renderScale: float = Field(default=2.0, gt=0)


class MappingEntryPayload(BaseModel):
    fieldType: str
    cell: Optional[CellPayload] = None
    area: Optional[AreaPayload] = None

    @model_validator(mode="after")
    def _one_location(self) -> "MappingEntryPayload":
        if (self.cell is None) == (self.area is None):
            raise ValueError("Each entry needs exactly one of cell or area")
        return self


class MappingPayload(BaseModel):
    """Captured locations in capture order, grouped by field on conversion."""

    kind: Literal["spreadsheet", "pdf"]
    entries: List[MappingEntryPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def _known_fields(self) -> "MappingPayload":
        known = {f.key for f in field_catalogue(self.kind)}
        unknown = sorted({e.fieldType for e in self.entries} - known)
        if unknown:
            raise ValueError(f"Unknown {self.kind} mapping fields: {unknown}")
        location = "cell" if self.kind == "spreadsheet" else "area"
        if any(getattr(e, location) is None for e in self.entries):
            raise ValueError(f"{self.kind} mappings take {location} locations only")
        return self

    def to_mapping_set(self) -> MappingSet:
        labels = {f.key: f.label for f in field_catalogue(self.kind)}
        ordinals: dict[str, int] = {}
        entries = []
        for entry in self.entries:
            if entry.cell is not None:
                location = CellLocation(sheet=entry.cell.sheet, ref=entry.cell.ref.strip().upper())
            else:
                area = entry.area
                location = AreaLocation(
                    area=PixelArea(area.x1, area.y1, area.x2, area.y2).normalized(),
                    page=area.page,
                    render_scale=area.renderScale,
                )
            ordinal = ordinals.get(entry.fieldType, 0)
            ordinals[entry.fieldType] = ordinal + 1
            entries.append(
                MappingEntry(
                    field_type=entry.fieldType,
                    label=labels[entry.fieldType],
                    location=location,
                    ordinal=ordinal,
                )
            )
        return MappingSet(kind=self.kind, entries=entries)


class TextLineEntryPayload(BaseModel):
    fieldType: str
    lineIndex: int = Field(ge=0)


class TextMappingPayload(BaseModel):
    """Lines as shown to the operator (edits applied) and the lines picked per field."""

    lines: List[str]
    entries: List[TextLineEntryPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def _valid_picks(self) -> "TextMappingPayload":
        known = {f.key for f in TEXT_FIELDS}
        unknown = sorted({e.fieldType for e in self.entries} - known)
        if unknown:
            raise ValueError(f"Unknown text mapping fields: {unknown}")
        for entry in self.entries:
            if entry.lineIndex >= len(self.lines) or not self.lines[entry.lineIndex].strip():
                raise ValueError(f"Line {entry.lineIndex} is not a text line")
        labels = {f.key: f.label for f in TEXT_FIELDS}
        missing = [labels[key] for key in REQUIRED_TEXT_FIELDS if key not in {e.fieldType for e in self.entries}]
        if missing:
            raise ValueError(f"Map these fields before continuing: {', '.join(missing)}")
        return self

    def to_mapping_set(self) -> MappingSet:
        labels = {f.key: f.label for f in TEXT_FIELDS}
        ordinals: dict[str, int] = {}
        entries = []
        for entry in self.entries:
            ordinal = ordinals.get(entry.fieldType, 0)
            ordinals[entry.fieldType] = ordinal + 1
            entries.append(
                MappingEntry(
                    field_type=entry.fieldType,
                    label=labels[entry.fieldType],
                    location=LineLocation(index=entry.lineIndex, text=self.lines[entry.lineIndex].strip()),
                    ordinal=ordinal,
                )
            )
        return MappingSet(kind="text", entries=entries)
