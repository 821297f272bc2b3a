"""Format preset catalogue loaded from the bundled YAML files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from quote_importer.domain.constants import DETAIL_FIELDS, HEADER_FIELDS, LABELLED_FIELDS
from quote_importer.errors import PresetError
from quote_importer.logging_config import get_logger
from quote_importer.presets.models import (
    CoverCells,
    DetailColumns,
    DetailLayout,
    FormatPreset,
    LabelKeywords,
    LayoutType,
    SectionLayout,
)

logger = get_logger(__name__)

PRESETS_DIR = Path(__file__).parent / "data"
DEFAULT_PRESET_ID = "default"
# Catalogue order, shown as-is in the preset picker.
PRESET_ORDER = ("default", "single_vertical", "minamikyushu", "horizontal", "simple")


def _string_tuple(data: Mapping[str, Any], key: str) -> tuple:
    values = data.get(key) or []
    if not isinstance(values, list):
        raise PresetError(f"'{key}' must be a list, got {type(values).__name__}")
    return tuple(str(value) for value in values)


def _column_letter(value: Any) -> Optional[str]:
    return str(value).upper() if value else None


def _require(data: Mapping[str, Any], fields: List[str], where: str) -> None:
    for field_name in fields:
        if field_name not in data:
            raise PresetError(f"Missing required field in {where}: {field_name}")


def _parse_details(data: Mapping[str, Any]) -> DetailLayout:
    _require(data, ["sheet_names", "header_row", "start_row", "max_row", "columns"], "details")

    columns_data = data["columns"]
    unknown = set(columns_data) - set(DETAIL_FIELDS)
    if unknown:
        raise PresetError(f"Unknown detail columns: {sorted(unknown)}")
    columns = DetailColumns(**{name: _string_tuple(columns_data, name) for name in columns_data})
    if not columns.product_name:
        raise PresetError("details.columns.product_name must list at least one keyword")

    header_row = int(data["header_row"])
    start_row = int(data["start_row"])
    max_row = int(data["max_row"])
    if not 1 <= header_row < start_row <= max_row:
        raise PresetError(
            f"Invalid detail rows: header_row={header_row}, start_row={start_row}, max_row={max_row}"
        )

    default_columns = {
        str(name): str(letter).upper() for name, letter in (data.get("default_columns") or {}).items()
    }

    return DetailLayout(
        sheet_names=_string_tuple(data, "sheet_names"),
        header_row=header_row,
        start_row=start_row,
        max_row=max_row,
        stop_words=_string_tuple(data, "stop_words"),
        columns=columns,
        default_columns=default_columns,
    )


def parse_preset(data: Mapping[str, Any]) -> FormatPreset:
    """Validate raw YAML data into a FormatPreset.

    Args:
        data: Mapping loaded from a preset file

    Returns:
        Validated FormatPreset

    Raises:
        PresetError: If the preset structure is invalid
    """
    if not isinstance(data, Mapping):
        raise PresetError("Preset file must contain a mapping")
    _require(data, ["id", "name", "layout_type", "cover", "details"], "preset")

    cover_data = data["cover"] or {}
    unknown = set(cover_data) - set(HEADER_FIELDS)
    if unknown:
        raise PresetError(f"Unknown cover fields: {sorted(unknown)}")

    labels_data = data.get("labels") or {}
    unknown = set(labels_data) - set(LABELLED_FIELDS)
    if unknown:
        raise PresetError(f"Unknown label fields: {sorted(unknown)}")

    try:
        layout_type = LayoutType(data["layout_type"])
    except ValueError as e:
        raise PresetError(f"Invalid layout_type: {data['layout_type']}") from e

    sections = None
    if data.get("sections"):
        sections_data = data["sections"]
        _require(sections_data, ["sheet_name", "name_column", "start_row"], "sections")
        sections = SectionLayout(
            sheet_name=str(sections_data["sheet_name"]),
            name_column=str(sections_data["name_column"]).upper(),
            start_row=int(sections_data["start_row"]),
            amount_column=_column_letter(sections_data.get("amount_column")),
            wholesale_column=_column_letter(sections_data.get("wholesale_column")),
            totals_rows=tuple(int(row) for row in sections_data.get("totals_rows", (15, 25))),
        )
        if len(sections.totals_rows) != 2 or sections.totals_rows[0] > sections.totals_rows[1]:
            raise PresetError(f"Invalid sections.totals_rows: {list(sections.totals_rows)}")

    return FormatPreset(
        id=str(data["id"]),
        name=str(data["name"]),
        description=str(data.get("description", "")),
        layout_type=layout_type,
        cover=CoverCells(**{name: _string_tuple(cover_data, name) for name in cover_data}),
        labels=LabelKeywords(**{name: _string_tuple(labels_data, name) for name in labels_data}),
        details=_parse_details(data["details"]),
        sections=sections,
    )


def load_preset(preset_path: Path) -> FormatPreset:
    """Load one preset file.

    Raises:
        PresetError: If the file cannot be read or is invalid
    """
    try:
        with open(preset_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise PresetError(f"Failed to load preset {preset_path.name}: {e}") from e
    return parse_preset(data)


@lru_cache(maxsize=1)
def _catalogue() -> Dict[str, FormatPreset]:
    presets: Dict[str, FormatPreset] = {}
    for preset_id in PRESET_ORDER:
        preset = load_preset(PRESETS_DIR / f"{preset_id}.yaml")
        if preset.id != preset_id:
            raise PresetError(f"Preset file {preset_id}.yaml declares id '{preset.id}'")
        presets[preset.id] = preset
    logger.debug("Loaded %d format presets", len(presets))
    return presets


def list_presets() -> List[FormatPreset]:
    """Return every preset in catalogue order."""
    return list(_catalogue().values())


def get_preset_by_id(preset_id: str) -> Optional[FormatPreset]:
    return _catalogue().get(preset_id)


def get_preset_by_name(name: str) -> Optional[FormatPreset]:
    for preset in _catalogue().values():
        if preset.name == name:
            return preset
    return None


def default_preset() -> FormatPreset:
    return _catalogue()[DEFAULT_PRESET_ID]
