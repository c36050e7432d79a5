"""Catalogue of validation issues raised while extracting proposal metadata.

Codes are stable across releases because downstream dashboards key on them.
Errors occupy the 0-99 range and warnings the 100-199 range.
"""

from __future__ import annotations

from datetime import date

from .models import Issue, Severity

__all__ = [
    "DOCUMENT_CONTAINS_NO_CONTENT",
    "MISSING_AUTHORS",
    "MISSING_METADATA_FIELDS",
    "MISSING_OR_INVALID_ID_AND_LINK",
    "MISSING_OR_INVALID_REVIEW_DATES",
    "MISSING_OR_INVALID_STATUS",
    "MISSING_REVIEW_MANAGERS",
    "MISSING_STATUS",
    "MISSING_TITLE",
    "LINK_DOES_NOT_MATCH_FILENAME",
    "review_ended",
]

DOCUMENT_CONTAINS_NO_CONTENT = Issue(0, "Document contains no content.")
MISSING_TITLE = Issue(1, "Missing title.")
MISSING_METADATA_FIELDS = Issue(2, "Missing list of proposal metadata fields.")
MISSING_OR_INVALID_ID_AND_LINK = Issue(3, "Missing or invalid proposal ID and link.")
MISSING_AUTHORS = Issue(4, "Missing author(s).")
MISSING_OR_INVALID_STATUS = Issue(5, "Missing or invalid status.")

MISSING_STATUS = Issue(100, "Missing status.", Severity.WARNING)
MISSING_OR_INVALID_REVIEW_DATES = Issue(
    101, "Missing or invalid review dates.", Severity.WARNING
)
MISSING_REVIEW_MANAGERS = Issue(103, "Missing review manager(s).", Severity.WARNING)
LINK_DOES_NOT_MATCH_FILENAME = Issue(
    104, "Proposal link does not match the document filename.", Severity.WARNING
)

_REVIEW_ENDED_CODE = 102


def review_ended(on: date) -> Issue:
    """Warning for a review period whose end date has already passed."""

    return Issue(
        _REVIEW_ENDED_CODE,
        f"Review period already ended on {on.isoformat()}.",
        Severity.WARNING,
    )
