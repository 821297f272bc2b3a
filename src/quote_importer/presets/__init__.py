"""Format preset exports."""

from .detector import detect_preset
from .models import FormatPreset, LayoutType, with_header_row
from .registry import (
    DEFAULT_PRESET_ID,
    default_preset,
    get_preset_by_id,
    get_preset_by_name,
    list_presets,
)

__all__ = [
    "DEFAULT_PRESET_ID",
    "FormatPreset",
    "LayoutType",
    "default_preset",
    "detect_preset",
    "get_preset_by_id",
    "get_preset_by_name",
    "list_presets",
    "with_header_row",
]
