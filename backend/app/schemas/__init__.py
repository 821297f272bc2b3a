"""API schema exports."""

from .cases import ImportCommitRequest, ImportCommitResponse
from .mapping import (
    AreaPayload,
    CellPayload,
    MappingEntryPayload,
    MappingPayload,
    TextLineEntryPayload,
    TextMappingPayload,
)
from .preset import PresetDetail, PresetSummary

__all__ = [
    "AreaPayload",
    "CellPayload",
    "ImportCommitRequest",
    "ImportCommitResponse",
    "MappingEntryPayload",
    "MappingPayload",
    "PresetDetail",
    "PresetSummary",
    "TextLineEntryPayload",
    "TextMappingPayload",
]
