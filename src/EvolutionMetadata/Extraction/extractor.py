"""Document Extraction Unit: one proposal's text to one :class:`Record`.

The unit never raises for malformed content. Structural problems (no title,
no header block) and field problems become issues on the returned record; only
the caller decides what happens when the text itself cannot be obtained.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from . import issues
from .fields import (
    AuthorsExtractor,
    ExtractionResult,
    IdentityExtractor,
    ImplementationExtractor,
    ReviewManagersExtractor,
    StatusExtractor,
    UpcomingFeatureFlagExtractor,
)
from .markdown import StructureParser, parse_proposal
from .models import DocumentSpec, Error, Issue, Record

__all__ = ["extract_record"]

_IDENTITY = IdentityExtractor()
_AUTHORS = AuthorsExtractor()
_REVIEW_MANAGERS = ReviewManagersExtractor()
_STATUS = StatusExtractor()
_IMPLEMENTATION = ImplementationExtractor()
_FEATURE_FLAG = UpcomingFeatureFlagExtractor()


def _merge(record: Record, result: ExtractionResult) -> None:
    record.errors.extend(result.errors)
    record.warnings.extend(result.warnings)


def _dedupe(found: list[Issue]) -> list[Issue]:
    seen: set[Issue] = set()
    unique = []
    for issue in found:
        if issue not in seen:
            seen.add(issue)
            unique.append(issue)
    return unique


def extract_record(
    text: str,
    spec: Optional[DocumentSpec],
    processing_date: datetime,
    parser: StructureParser = parse_proposal,
) -> Record:
    """Run every field extractor over ``text`` and assemble the record.

    Args:
        text: Raw markdown of the proposal.
        spec: Listing entry the text was fetched for. Supplies the content
            hash and the filename the proposal link must match; ``None`` when
            the text did not come from a listing.
        processing_date: Reference instant for review-period checks.
        parser: Structural parser producing the title and header fields.

    Returns:
        Record with every issue found attached, never ``None``.
    """

    record = Record(content_hash=spec.content_hash if spec is not None else "")
    if not text.strip():
        record.errors.append(issues.DOCUMENT_CONTAINS_NO_CONTENT)
        return record

    document = parser(text)
    if document.title:
        record.title = document.title
    else:
        record.errors.append(issues.MISSING_TITLE)

    fields = document.fields
    if fields is None:
        record.errors.append(issues.MISSING_METADATA_FIELDS)
        return record

    identity = _IDENTITY.extract(fields, processing_date)
    _merge(record, identity)
    if identity.value is not None:
        record.id = identity.value.id
        record.link = identity.value.link
        if spec is not None and record.link != spec.filename:
            record.warnings.append(issues.LINK_DOES_NOT_MATCH_FILENAME)

    authors = _AUTHORS.extract(fields, processing_date)
    _merge(record, authors)
    record.authors = authors.value or []

    managers = _REVIEW_MANAGERS.extract(fields, processing_date)
    _merge(record, managers)
    record.review_managers = managers.value or []

    status = _STATUS.extract(fields, processing_date)
    _merge(record, status)
    record.status = status.value if status.value is not None else Error()

    implementation = _IMPLEMENTATION.extract(fields, processing_date)
    _merge(record, implementation)
    record.implementation = implementation.value or []

    flag = _FEATURE_FLAG.extract(fields, processing_date)
    _merge(record, flag)
    record.upcoming_feature_flag = flag.value

    record.errors = _dedupe(record.errors)
    record.warnings = _dedupe(record.warnings)
    return record
