"""Exception hierarchy for the quotation importer.

Missing or ambiguous fields are never errors: extraction degrades to empty values
that the operator fills in during confirmation. Only unreadable input, invalid
session transitions, failed confirmation gates and store failures raise.
"""

from __future__ import annotations

from typing import List, Sequence


class QuoteImportError(Exception):
    """Base class for every error raised by this package."""


class PresetError(QuoteImportError):
    """A bundled format preset is malformed."""


class WorkbookParseError(QuoteImportError):
    """The uploaded bytes are not a readable workbook."""


class PdfParseError(QuoteImportError):
    """The uploaded bytes are not a readable PDF document."""


class SessionStateError(QuoteImportError):
    """A mapping session received an input its current state does not accept."""


class ConfirmationError(QuoteImportError):
    """The import confirmation gate refused to commit."""

    def __init__(self, issues: Sequence[str]):
        self.issues: List[str] = list(issues)
        super().__init__("; ".join(self.issues) or "Import is not ready to commit")


class StoreError(QuoteImportError):
    """The external store rejected a read or write."""

    def __init__(self, message: str, *, table: str | None = None):
        self.table = table
        super().__init__(message if table is None else f"{table}: {message}")
