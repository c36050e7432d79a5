"""Exception taxonomy for extraction jobs.

Responsibilities
----------------
- Separate job-level failures (:class:`ExtractionJobError` and subclasses),
  which abort a run before any document is scheduled, from per-document
  failures (:class:`DocumentFetchError`), which the scheduler converts into
  placeholder records.
- Retain enough context (document id, URL, path) for structured log sinks via
  :meth:`ExtractionJobError.to_dict`.

Field-level problems are never raised; they are recorded as
:class:`~EvolutionMetadata.Extraction.models.Issue` values on the record.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

__all__ = (
    "DocumentFetchError",
    "ExtractionJobError",
    "ListingError",
    "PreviousResultsError",
    "SnapshotError",
)


class ExtractionJobError(Exception):
    """Base class for failures that abort a whole extraction run."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        path: Path | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.path = str(path) if path is not None else None
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert to a mapping suitable for ``log_event`` fields."""

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "url": self.url,
            "path": self.path,
            "cause": str(self.cause) if self.cause else None,
        }


class ListingError(ExtractionJobError):
    """Raised when the branch information or proposal listing cannot be obtained."""


class SnapshotError(ExtractionJobError):
    """Raised when a snapshot directory is missing required inputs."""


class PreviousResultsError(ExtractionJobError):
    """Raised when previous results were requested but cannot be read."""


class DocumentFetchError(Exception):
    """Raised by fetchers when a single document's text cannot be obtained."""

    def __init__(
        self, message: str, *, doc_id: str | None = None, url: str | None = None
    ) -> None:
        super().__init__(message)
        self.doc_id = doc_id
        self.url = url
