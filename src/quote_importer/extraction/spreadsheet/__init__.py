"""Spreadsheet extraction package."""

from .workbook import Workbook, column_index, column_letter, load_workbook, parse_ref

__all__ = ["Workbook", "column_index", "column_letter", "load_workbook", "parse_ref"]
