"""Error taxonomy for document parsing and archive synchronization.

Document-level errors (SchemaError, UnsupportedVersionError) concern a single
Framework or Prompt. Archive importers catch them per file and skip that file.

Archive-level errors (ImportFormatError, QuotaExceededError) abort the whole
operation before anything is written.

Every error carries a short ``user_message`` suitable for display; the
exception text keeps the full diagnostic detail.
"""

from typing import Any, Optional


class DocumentError(Exception):
    """Base class for errors raised while parsing one document."""

    user_message = "The document could not be read."


class SchemaError(DocumentError):
    """Structural or type validation failure on one document."""

    user_message = "The document does not match its schema."

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class UnsupportedVersionError(DocumentError):
    """Document version outside the known migration range."""

    user_message = "The document was written by an unsupported version."

    def __init__(self, version: Any, kind: str = "document"):
        super().__init__(f"Unsupported {kind} version: {version}")
        self.version = version
        self.kind = kind


class ArchiveError(Exception):
    """Base class for errors that abort a whole archive operation."""

    user_message = "The archive could not be processed."


class ImportFormatError(ArchiveError):
    """The archive bytes cannot be opened as a zip file."""

    user_message = "The import file format is not valid."


class QuotaExceededError(ArchiveError):
    """The archive holds more prompts than the plan allows per import."""

    user_message = "The archive contains more prompts than your plan allows."

    def __init__(self, plan: str, count: int, limit: int):
        super().__init__(
            f"Plan '{plan}' allows at most {limit} prompts per import, archive has {count}"
        )
        self.plan = plan
        self.count = count
        self.limit = limit
