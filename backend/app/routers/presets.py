"""Format preset catalogue routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException

from quote_importer.presets import get_preset_by_id, list_presets
from quote_importer.presets.models import FormatPreset

from ..schemas.preset import PresetDetail, PresetSummary

router = APIRouter(prefix="/presets", tags=["presets"])


def _detail(preset: FormatPreset) -> PresetDetail:
    details = preset.details
    return PresetDetail(
        **preset.summary(),
        detailSheets=list(details.sheet_names),
        headerRow=details.header_row,
        startRow=details.start_row,
        maxRow=details.max_row,
        stopWords=list(details.stop_words),
        defaultColumns=dict(details.default_columns),
        sectionsSheet=preset.sections.sheet_name if preset.sections else None,
    )


@router.get("", summary="List format presets", response_model=List[PresetSummary])
def get_presets():
    return [PresetSummary(**preset.summary()) for preset in list_presets()]


@router.get("/{preset_id}", summary="Get one format preset", response_model=PresetDetail)
def get_preset(preset_id: str):
    preset = get_preset_by_id(preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail="Preset not found")
    return _detail(preset)
