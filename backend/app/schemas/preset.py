"""API schemas for the preset catalogue."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


class PresetSummary(BaseModel):
    id: str
    name: str
    description: str
    layoutType: str


class PresetDetail(PresetSummary):
    detailSheets: List[str]
    headerRow: int
    startRow: int
    maxRow: int
    stopWords: List[str]
    defaultColumns: Dict[str, str]
    sectionsSheet: Optional[str] = None
