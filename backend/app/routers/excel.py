"""Workbook import routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from quote_importer.extraction import process_workbook
from quote_importer.extraction.spreadsheet import Workbook
from quote_importer.mapping.apply import apply_spreadsheet_mapping
from quote_importer.presets import detect_preset, get_preset_by_id

from ..config import Settings, get_settings
from ..uploads import SPREADSHEET_MAGIC, parse_mapping, read_upload

router = APIRouter(prefix="/excel", tags=["excel"])


@router.post("/extract", summary="Extract a quotation from a workbook")
async def extract_workbook(
    *,
    file: UploadFile = File(...),
    preset_id: Optional[str] = Form(None, alias="presetId"),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, SPREADSHEET_MAGIC, "spreadsheet")

    result = process_workbook(data, preset_id=preset_id)
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result.get("error", "Workbook extraction failed"))

    return {
        "quotation": result["quotation"].model_dump(by_alias=True),
        "preset": result["preset"],
        "fileName": file.filename or "quotation.xlsx",
    }


@router.post("/preview", summary="Cell grid of one sheet for mapping")
async def preview_workbook(
    *,
    file: UploadFile = File(...),
    sheet: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, SPREADSHEET_MAGIC, "spreadsheet")
    workbook = Workbook.from_bytes(data)
    if not workbook.sheet_names:
        raise HTTPException(status_code=400, detail="Workbook has no sheets")

    sheet_name = sheet or workbook.sheet_names[0]
    try:
        preview = workbook.preview(sheet_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Sheet not found: {sheet_name}") from None

    return {"sheets": workbook.sheet_names, "preview": preview.to_dict()}


@router.post("/extract-mapped", summary="Extract a workbook using captured cells")
async def extract_mapped_workbook(
    *,
    file: UploadFile = File(...),
    mapping: str = Form(...),
    preset_id: Optional[str] = Form(None, alias="presetId"),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, SPREADSHEET_MAGIC, "spreadsheet")
    payload = parse_mapping(mapping, "spreadsheet")

    preset = None
    if preset_id:
        preset = get_preset_by_id(preset_id)
        if preset is None:
            raise HTTPException(status_code=400, detail=f"Unknown preset: {preset_id}")

    workbook = Workbook.from_bytes(data)
    preset = preset or detect_preset(workbook)
    try:
        quotation = apply_spreadsheet_mapping(workbook, payload.to_mapping_set(), preset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "quotation": quotation.model_dump(by_alias=True),
        "preset": preset.summary(),
        "fileName": file.filename or "quotation.xlsx",
    }
