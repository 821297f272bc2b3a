"""Service layer exports."""

from .confirmation import ImportConfirmation
from .persistence import CommitResult, commit_import, generate_case_id, resolve_customer

__all__ = [
    "CommitResult",
    "ImportConfirmation",
    "commit_import",
    "generate_case_id",
    "resolve_customer",
]
