"""Upload validation shared by the import routes."""

from __future__ import annotations

from fastapi import HTTPException, UploadFile
from pydantic import ValidationError

from quote_importer.extraction.spreadsheet.workbook import XLS_MAGIC

from .config import Settings
from .schemas.mapping import MappingPayload

PDF_MAGIC = b"%PDF"
# .xlsx files are zip containers, legacy .xls files OLE2 documents
SPREADSHEET_MAGIC = (b"PK", XLS_MAGIC)


async def read_upload(file: UploadFile, settings: Settings, magic: bytes | tuple[bytes, ...], kind: str) -> bytes:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413, detail=f"File too large (maximum {settings.max_upload_mb}MB)"
        )

    if not data.startswith(magic):
        raise HTTPException(status_code=400, detail=f"File must be a {kind} document")

    return data


def parse_mapping(raw: str, kind: str) -> MappingPayload:
    """Validate the JSON mapping form field of an extract-mapped request."""
    try:
        payload = MappingPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False, include_input=False)) from exc
    if payload.kind != kind:
        raise HTTPException(status_code=400, detail=f"Expected a {kind} mapping, got {payload.kind}")
    return payload
