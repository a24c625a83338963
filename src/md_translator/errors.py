"""Exception hierarchy for md-translator."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class MdTranslatorError(Exception):
    """Base exception for all custom errors."""


class DocumentParseError(MdTranslatorError):
    """Raised when a document's event stream is structurally broken."""

    def __init__(self, document: str, message: str) -> None:
        self.document = document
        self.message = message
        name = document or "<document>"
        super().__init__(f"{name}: {message}")


class CatalogParseError(MdTranslatorError):
    """Raised when a PO/POT file cannot be read back without losing entries."""

    def __init__(
        self,
        path: Optional[Union[str, Path]],
        line: int,
        column: int,
        message: str,
    ) -> None:
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column
        self.message = message
        location = f"{self.path or '<catalog>'}:{line}:{column}"
        super().__init__(f"{location}: {message}")


class CatalogConflictError(CatalogParseError):
    """Raised when the same message key carries two different translations."""
