# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.fields.status",
#   "purpose": "Status, implementation version, and review period heuristics.",
#   "sections": [
#     {
#       "id": "split-status",
#       "name": "split_status",
#       "anchor": "function-split-status",
#       "kind": "function"
#     },
#     {
#       "id": "version-for-string",
#       "name": "version_for_string",
#       "anchor": "function-version-for-string",
#       "kind": "function"
#     },
#     {
#       "id": "reviewdates",
#       "name": "ReviewDates",
#       "anchor": "class-reviewdates",
#       "kind": "class"
#     },
#     {
#       "id": "dates-for-string",
#       "name": "dates_for_string",
#       "anchor": "function-dates-for-string",
#       "kind": "function"
#     },
#     {
#       "id": "status-for-name",
#       "name": "status_for_name",
#       "anchor": "function-status-for-name",
#       "kind": "function"
#     },
#     {
#       "id": "statusextractor",
#       "name": "StatusExtractor",
#       "anchor": "class-statusextractor",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Status, implementation version, and review period heuristics.

The ``Status`` header is free text written by proposal authors, wrapped in
strong emphasis and optionally followed by a parenthesised detail::

    **Implemented (Swift 5.9)**
    **Active Review (May 1 - May 14, 2024)**
    **Scheduled for Review (Dec 30 - Jan 3)**
    **Withdrawn**

The helpers below are pure string-in/value-out functions so each rule can be
tested without building a document:

- :func:`split_status` separates the status name from its detail using a
  shortest-match rule.
- :func:`version_for_string` reads the implementation version, returning the
  ``"none"`` sentinel when no detail is given.
- :func:`dates_for_string` reads a review period. Review periods carry no
  year, so dates are placed in the processing year and an end date that falls
  before the start date is moved into the following year.
- :func:`status_for_name` maps the status name onto a status variant.

:class:`StatusExtractor` combines them under the field extractor contract.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Optional

from .. import issues
from ..markdown import HeaderFields
from ..models import (
    Accepted,
    AcceptedWithRevisions,
    ActiveReview,
    AwaitingReview,
    Error,
    Implemented,
    Issue,
    PreviewingManagerReview,
    Rejected,
    ReturnedForRevision,
    ScheduledForReview,
    Status,
    Withdrawn,
)
from .base import ExtractionResult

__all__ = [
    "ReviewDates",
    "StatusExtractor",
    "dates_for_string",
    "split_status",
    "status_for_name",
    "version_for_string",
]

NO_VERSION = "none"

_STATUS_RE = re.compile(r"(?P<name>.*?)(?:$|\s\((?P<detail>.*?)\))", re.DOTALL)
_IMPLEMENTED_RE = re.compile(r"implemented", re.IGNORECASE)
_REVIEW_RE = re.compile(r"(scheduled for|active) review", re.IGNORECASE)
_MONTH_RE = re.compile(
    r"\b(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b",
    re.IGNORECASE,
)
_INTEGER_RE = re.compile(r"\d+")
_MONTH_NUMBERS = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_StatusFactory = Callable[[str, str, str], Status]

_STATUS_BY_NAME: dict[str, _StatusFactory] = {
    "Awaiting Review": lambda version, start, end: AwaitingReview(),
    "Awaiting review": lambda version, start, end: AwaitingReview(),
    "Scheduled for Review": lambda version, start, end: ScheduledForReview(start, end),
    "Scheduled for review": lambda version, start, end: ScheduledForReview(start, end),
    "Active Review": lambda version, start, end: ActiveReview(start, end),
    "Active review": lambda version, start, end: ActiveReview(start, end),
    "Returned for Revision": lambda version, start, end: ReturnedForRevision(),
    "Returned for revision": lambda version, start, end: ReturnedForRevision(),
    "Withdrawn": lambda version, start, end: Withdrawn(),
    "Rejected": lambda version, start, end: Rejected(),
    "Accepted": lambda version, start, end: Accepted(),
    "Accepted with Revisions": lambda version, start, end: AcceptedWithRevisions(),
    "Accepted with revisions": lambda version, start, end: AcceptedWithRevisions(),
    "Accepted with modifications": lambda version, start, end: AcceptedWithRevisions(),
    "Implemented": lambda version, start, end: Implemented(version),
    "Previewing": lambda version, start, end: PreviewingManagerReview(),
}


def split_status(text: str) -> tuple[str, str]:
    """Split ``"Name (detail)"`` into ``(name, detail)``; detail may be empty."""

    match = _STATUS_RE.match(text.strip())
    if match is None:  # pragma: no cover - the pattern always matches
        return text.strip(), ""
    return match.group("name").strip(), (match.group("detail") or "").strip()


def version_for_string(detail: str) -> str:
    """Return the implementation version named in ``detail``.

    ``"Swift 5.9"`` and ``"Swift 5.9 with trailing commentary"`` both yield
    ``"5.9"``; an empty detail yields ``"none"``.
    """

    if not detail:
        return NO_VERSION
    _, marker, remainder = detail.partition("Swift ")
    stripped = remainder if marker else detail
    tokens = stripped.split()
    return tokens[0] if tokens else ""


@dataclass(frozen=True, slots=True)
class ReviewDates:
    """Normalised ``YYYY-MM-DD`` review period plus an optional ended warning."""

    start: str
    end: str
    review_ended: Optional[Issue] = None


def _month_number(name: str) -> int:
    return _MONTH_NUMBERS[name[:3].lower()]


def dates_for_string(text: str, processing_date: datetime) -> Optional[ReviewDates]:
    """Parse a year-less review period such as ``"May 1 - May 14"``.

    Returns ``None`` when the text does not name one or two months and exactly
    two one- or two-digit days, or when the resulting calendar dates are
    impossible. Longer numbers, such as a trailing year, are ignored.
    """

    months = _MONTH_RE.findall(text)
    if not 1 <= len(months) <= 2:
        return None
    start_month = _month_number(months[0])
    end_month = _month_number(months[1]) if len(months) == 2 else start_month

    days = [token for token in _INTEGER_RE.findall(text) if len(token) <= 2]
    if len(days) != 2:
        return None
    start_day, end_day = int(days[0]), int(days[1])

    year = processing_date.year
    try:
        start = date(year, start_month, start_day)
        end = date(year, end_month, end_day)
        if end < start:
            end = date(year + 1, end_month, end_day)
    except ValueError:
        return None

    review_ended = None
    if datetime.combine(end, time.min, tzinfo=processing_date.tzinfo) < processing_date:
        review_ended = issues.review_ended(end)
    return ReviewDates(start.isoformat(), end.isoformat(), review_ended)


def status_for_name(name: str, *, version: str = "", start: str = "", end: str = "") -> Optional[Status]:
    """Map a status name (case-sensitive) onto its variant, or ``None``."""

    factory = _STATUS_BY_NAME.get(name)
    if factory is None:
        return None
    return factory(version, start, end)


class StatusExtractor:
    """Extracts the ``Status`` header field."""

    label = "Status"

    def extract(self, fields: HeaderFields, processing_date: datetime) -> ExtractionResult[Status]:
        result: ExtractionResult[Status] = ExtractionResult()
        status_field = fields.get(self.label)
        if status_field is None or not status_field.strong:
            result.warnings.append(issues.MISSING_STATUS)
            return result

        name, detail = split_status(status_field.strong[0])
        version = start = end = ""
        if _IMPLEMENTED_RE.search(name):
            version = version_for_string(detail)
        elif _REVIEW_RE.search(name):
            dates = dates_for_string(detail, processing_date)
            if dates is None:
                result.warnings.append(issues.MISSING_OR_INVALID_REVIEW_DATES)
            else:
                start, end = dates.start, dates.end
                if dates.review_ended is not None:
                    result.warnings.append(dates.review_ended)

        status = status_for_name(name, version=version, start=start, end=end)
        if status is None:
            result.errors.append(issues.MISSING_OR_INVALID_STATUS)
            status = Error()
        result.value = status
        return result
