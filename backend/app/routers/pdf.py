"""PDF import routes."""

from __future__ import annotations

import base64
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from quote_importer.extraction import process_pdf
from quote_importer.extraction.pdfextract import parse_pdf, render_page_png
from quote_importer.extraction.pdfextract.linearize import DEFAULT_LINE_TOLERANCE
from quote_importer.mapping.apply import apply_pdf_mapping, apply_text_mapping

from ..config import Settings, get_settings
from ..schemas.mapping import TextMappingPayload
from ..uploads import PDF_MAGIC, parse_mapping, read_upload

router = APIRouter(prefix="/pdf", tags=["pdf"])


@router.post("/extract", summary="Extract a quotation from PDF text")
async def extract_pdf(
    *,
    file: UploadFile = File(...),
    tolerance: float = Form(DEFAULT_LINE_TOLERANCE, ge=0),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, PDF_MAGIC, "PDF")

    result = process_pdf(data, tolerance=tolerance)
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result.get("error", "PDF extraction failed"))

    return {
        "quotation": result["quotation"].model_dump(by_alias=True),
        "lines": result["lines"],
        "pageCount": result["pages"],
        "fileName": file.filename or "quotation.pdf",
    }


@router.post("/mapdata", summary="Positioned text records for area mapping")
async def pdf_map_data(
    *,
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, PDF_MAGIC, "PDF")
    document = parse_pdf(data)
    return {
        "pages": [{"index": p.index, "width": p.width, "height": p.height} for p in document.pages],
        "records": [
            {"text": r.text, "x": r.x, "y": r.y, "page": r.page} for r in document.records
        ],
    }


@router.post("/render", summary="Render one page for area mapping")
async def render_pdf_page(
    *,
    file: UploadFile = File(...),
    page: int = Form(0, ge=0),
    scale: Optional[float] = Form(None, gt=0),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, PDF_MAGIC, "PDF")
    try:
        rendered = render_page_png(data, page, scale or settings.pdf_render_scale)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return {
        "pngBase64": base64.b64encode(rendered.png).decode("utf-8"),
        "page": rendered.page_index,
        "widthPx": rendered.width_px,
        "heightPx": rendered.height_px,
        "renderScale": rendered.render_scale,
        "pageWidthPt": rendered.page_width_pt,
        "pageHeightPt": rendered.page_height_pt,
    }


@router.post("/extract-mapped", summary="Extract a PDF using drawn areas")
async def extract_mapped_pdf(
    *,
    file: UploadFile = File(...),
    mapping: str = Form(...),
    settings: Settings = Depends(get_settings),
):
    data = await read_upload(file, settings, PDF_MAGIC, "PDF")
    payload = parse_mapping(mapping, "pdf")
    document = parse_pdf(data)
    try:
        quotation = apply_pdf_mapping(document, payload.to_mapping_set())
    except IndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "quotation": quotation.model_dump(by_alias=True),
        "fileName": file.filename or "quotation.pdf",
    }


@router.post("/extract-text-mapped", summary="Fill header fields from picked text lines")
def extract_text_mapped(payload: TextMappingPayload):
    quotation = apply_text_mapping(payload.lines, payload.to_mapping_set())
    return {"quotation": quotation.model_dump(by_alias=True)}
