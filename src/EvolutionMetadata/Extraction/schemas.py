# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.schemas",
#   "purpose": "Pydantic schemas validating saved metadata JSON before reuse.",
#   "sections": [
#     {
#       "id": "issuerow",
#       "name": "IssueRow",
#       "anchor": "class-issuerow",
#       "kind": "class"
#     },
#     {
#       "id": "status-rows",
#       "name": "StatusRow",
#       "anchor": "class-statusrow",
#       "kind": "class"
#     },
#     {
#       "id": "recordrow",
#       "name": "RecordRow",
#       "anchor": "class-recordrow",
#       "kind": "class"
#     },
#     {
#       "id": "aggregaterow",
#       "name": "AggregateRow",
#       "anchor": "class-aggregaterow",
#       "kind": "class"
#     },
#     {
#       "id": "parse-records",
#       "name": "parse_records",
#       "anchor": "function-parse-records",
#       "kind": "function"
#     },
#     {
#       "id": "parse-aggregate",
#       "name": "parse_aggregate",
#       "anchor": "function-parse-aggregate",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Schemas for Saved Metadata

Previously published results, ``previous-results.json`` and
``expected-results.json`` are read back through the models below before any
record is reused or compared. The rows mirror the published layout
(camelCase keys, status as ``{"state": ...}``) and convert into the plain
dataclasses from :mod:`.models` that the rest of the pipeline uses.

Anything that does not fit the layout raises :class:`pydantic.ValidationError`;
callers turn that into a job-level error.

Usage:
    >>> records = parse_records([{"id": "SE-0001", "sha": "abc"}])
    >>> records[0].content_hash
    'abc'
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .models import (
    SCHEMA_VERSION,
    STATUS_VARIANTS,
    AggregateResult,
    Issue,
    Link,
    Person,
    Record,
    Severity,
    Status,
)

__all__ = [
    "AggregateRow",
    "IssueRow",
    "LinkRow",
    "PersonRow",
    "RecordRow",
    "StatusRow",
    "parse_aggregate",
    "parse_records",
]

_STATUS_TYPES: dict[str, type] = {variant.state: variant for variant in STATUS_VARIANTS}


class _Row(BaseModel):
    # Published results carry extra keys (tracking bugs, previous ids) that are not modelled.
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class IssueRow(_Row):
    code: int = Field(..., ge=0, description="Stable issue code")
    message: str = Field(..., description="Human readable message")
    kind: Severity = Field(Severity.ERROR, description="error or warning")

    def to_issue(self) -> Issue:
        return Issue(self.code, self.message, self.kind)


class PersonRow(_Row):
    name: str
    link: str = ""

    def to_person(self) -> Person:
        return Person(self.name, self.link)


class LinkRow(_Row):
    title: str
    url: str

    def to_link(self) -> Link:
        return Link(self.title, self.url)


# --- Status rows, discriminated on ``state`` ---


class _StatusRow(_Row):
    def to_status(self) -> Status:
        payload = self.model_dump(exclude={"state"})
        return _STATUS_TYPES[self.state](**payload)  # type: ignore[attr-defined]


class AwaitingReviewRow(_StatusRow):
    state: Literal["awaitingReview"]


class ScheduledForReviewRow(_StatusRow):
    state: Literal["scheduledForReview"]
    start: str = ""
    end: str = ""


class ActiveReviewRow(_StatusRow):
    state: Literal["activeReview"]
    start: str = ""
    end: str = ""


class ReturnedForRevisionRow(_StatusRow):
    state: Literal["returnedForRevision"]


class WithdrawnRow(_StatusRow):
    state: Literal["withdrawn"]


class RejectedRow(_StatusRow):
    state: Literal["rejected"]


class AcceptedRow(_StatusRow):
    state: Literal["accepted"]


class AcceptedWithRevisionsRow(_StatusRow):
    state: Literal["acceptedWithRevisions"]


class ImplementedRow(_StatusRow):
    state: Literal["implemented"]
    version: str = ""


class PreviewingRow(_StatusRow):
    state: Literal["previewing"]


class ErrorRow(_StatusRow):
    state: Literal["error"] = "error"


StatusRow = Annotated[
    Union[
        AwaitingReviewRow,
        ScheduledForReviewRow,
        ActiveReviewRow,
        ReturnedForRevisionRow,
        WithdrawnRow,
        RejectedRow,
        AcceptedRow,
        AcceptedWithRevisionsRow,
        ImplementedRow,
        PreviewingRow,
        ErrorRow,
    ],
    Field(discriminator="state"),
]


class RecordRow(_Row):
    """One proposal entry as published.

    Only ``id`` and ``sha`` matter for reuse, so every key is optional; a key
    that is present must still have the published shape.
    """

    id: str = ""
    title: str = ""
    link: str = ""
    authors: list[PersonRow] = Field(default_factory=list)
    review_managers: list[PersonRow] = Field(default_factory=list, alias="reviewManagers")
    status: StatusRow = Field(default_factory=ErrorRow)
    sha: str = ""
    implementation: list[LinkRow] = Field(default_factory=list)
    upcoming_feature_flag: Optional[str] = Field(None, alias="upcomingFeatureFlag")
    errors: list[IssueRow] = Field(default_factory=list)
    warnings: list[IssueRow] = Field(default_factory=list)

    def to_record(self) -> Record:
        return Record(
            id=self.id,
            title=self.title,
            link=self.link,
            authors=[person.to_person() for person in self.authors],
            review_managers=[person.to_person() for person in self.review_managers],
            status=self.status.to_status(),
            content_hash=self.sha,
            implementation=[link.to_link() for link in self.implementation],
            upcoming_feature_flag=self.upcoming_feature_flag or None,
            errors=[issue.to_issue() for issue in self.errors],
            warnings=[issue.to_issue() for issue in self.warnings],
        )


class AggregateRow(_Row):
    """The versioned envelope written by ``AggregateResult.to_json``."""

    creation_date: str = Field("", alias="creationDate")
    tool_version: str = Field("", alias="toolVersion")
    commit: str = ""
    implementation_versions: list[str] = Field(default_factory=list, alias="implementationVersions")
    proposals: list[RecordRow] = Field(default_factory=list)
    schema_version: str = Field(SCHEMA_VERSION, alias="schemaVersion")

    def to_aggregate(self) -> AggregateResult:
        return AggregateResult(
            creation_date=self.creation_date,
            tool_version=self.tool_version,
            commit=self.commit,
            implementation_versions=list(self.implementation_versions),
            records=[row.to_record() for row in self.proposals],
            schema_version=self.schema_version,
        )


_SAVED_RESULTS = TypeAdapter(Union[list[RecordRow], AggregateRow])


def parse_records(payload: Any) -> list[Record]:
    """Validate a bare record list or an aggregate envelope.

    ``None`` (no saved file) yields an empty list.

    Raises:
        pydantic.ValidationError: If the payload does not match either layout.
    """

    if payload is None:
        return []
    saved = _SAVED_RESULTS.validate_python(payload)
    if isinstance(saved, AggregateRow):
        return [row.to_record() for row in saved.proposals]
    return [row.to_record() for row in saved]


def parse_aggregate(payload: Any) -> AggregateResult:
    return AggregateRow.model_validate(payload).to_aggregate()
