# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.models",
#   "purpose": "Typed records exchanged between extraction pipeline stages.",
#   "sections": [
#     {
#       "id": "severity",
#       "name": "Severity",
#       "anchor": "class-severity",
#       "kind": "class"
#     },
#     {
#       "id": "issue",
#       "name": "Issue",
#       "anchor": "class-issue",
#       "kind": "class"
#     },
#     {
#       "id": "status-variants",
#       "name": "Status",
#       "anchor": "class-statusbase",
#       "kind": "class"
#     },
#     {
#       "id": "status-variants-table",
#       "name": "STATUS_VARIANTS",
#       "anchor": "status-variants",
#       "kind": "constant"
#     },
#     {
#       "id": "documentspec",
#       "name": "DocumentSpec",
#       "anchor": "class-documentspec",
#       "kind": "class"
#     },
#     {
#       "id": "record",
#       "name": "Record",
#       "anchor": "class-record",
#       "kind": "class"
#     },
#     {
#       "id": "sortablerecord",
#       "name": "SortableRecord",
#       "anchor": "class-sortablerecord",
#       "kind": "class"
#     },
#     {
#       "id": "aggregateresult",
#       "name": "AggregateResult",
#       "anchor": "class-aggregateresult",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Typed records exchanged between extraction pipeline stages.

The resolver, scheduler, and aggregator pass the small dataclasses defined here
between each other: document specs describing what to read, records describing
what was extracted, and the aggregate envelope written to disk. Serialisation
helpers live next to the types so the published JSON layout (camelCase keys,
status encoded as ``{"state": ...}``) has exactly one definition; reading it
back is validated by :mod:`.schemas`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Optional, Union
from urllib.parse import urlparse

__all__ = [
    "SCHEMA_VERSION",
    "STATUS_VARIANTS",
    "AcceptedWithRevisions",
    "Accepted",
    "ActiveReview",
    "AggregateResult",
    "AwaitingReview",
    "DocumentSpec",
    "Error",
    "Implemented",
    "Issue",
    "Link",
    "Person",
    "PreviewingManagerReview",
    "Record",
    "Rejected",
    "ReturnedForRevision",
    "ScheduledForReview",
    "Severity",
    "SortableRecord",
    "Status",
    "Withdrawn",
]

SCHEMA_VERSION = "1.0.0"


class Severity(str, Enum):
    """Grading applied to every extraction issue."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Issue:
    """A graded diagnostic attached to a record."""

    code: int
    message: str
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "kind": self.severity.value, "message": self.message}


# ---------------------------------------------------------------------------
# Status sum type
# ---------------------------------------------------------------------------


class StatusBase:
    """Shared serialisation for status variants; never instantiated directly."""

    __slots__ = ()
    state: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"state": self.state}
        for item in fields(self):  # type: ignore[arg-type]
            payload[item.name] = getattr(self, item.name)
        return payload


@dataclass(frozen=True, slots=True)
class AwaitingReview(StatusBase):
    state: ClassVar[str] = "awaitingReview"


@dataclass(frozen=True, slots=True)
class ScheduledForReview(StatusBase):
    state: ClassVar[str] = "scheduledForReview"

    start: str = ""
    end: str = ""


@dataclass(frozen=True, slots=True)
class ActiveReview(StatusBase):
    state: ClassVar[str] = "activeReview"

    start: str = ""
    end: str = ""


@dataclass(frozen=True, slots=True)
class ReturnedForRevision(StatusBase):
    state: ClassVar[str] = "returnedForRevision"


@dataclass(frozen=True, slots=True)
class Withdrawn(StatusBase):
    state: ClassVar[str] = "withdrawn"


@dataclass(frozen=True, slots=True)
class Rejected(StatusBase):
    state: ClassVar[str] = "rejected"


@dataclass(frozen=True, slots=True)
class Accepted(StatusBase):
    state: ClassVar[str] = "accepted"


@dataclass(frozen=True, slots=True)
class AcceptedWithRevisions(StatusBase):
    state: ClassVar[str] = "acceptedWithRevisions"


@dataclass(frozen=True, slots=True)
class Implemented(StatusBase):
    state: ClassVar[str] = "implemented"

    version: str = ""


@dataclass(frozen=True, slots=True)
class PreviewingManagerReview(StatusBase):
    state: ClassVar[str] = "previewing"


@dataclass(frozen=True, slots=True)
class Error(StatusBase):
    """Sentinel for a status that could not be parsed."""

    state: ClassVar[str] = "error"


Status = Union[
    AwaitingReview,
    ScheduledForReview,
    ActiveReview,
    ReturnedForRevision,
    Withdrawn,
    Rejected,
    Accepted,
    AcceptedWithRevisions,
    Implemented,
    PreviewingManagerReview,
    Error,
]

STATUS_VARIANTS: tuple[type, ...] = (
    AwaitingReview,
    ScheduledForReview,
    ActiveReview,
    ReturnedForRevision,
    Withdrawn,
    Rejected,
    Accepted,
    AcceptedWithRevisions,
    Implemented,
    PreviewingManagerReview,
    Error,
)


# ---------------------------------------------------------------------------
# Documents and records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DocumentSpec:
    """Identity, content hash, and listing position of one input document."""

    locator: Union[str, Path]
    content_hash: str
    sort_index: int

    @property
    def filename(self) -> str:
        if isinstance(self.locator, Path):
            return self.locator.name
        return Path(urlparse(self.locator).path).name

    @property
    def id(self) -> str:
        return "SE-" + self.filename[:4]

    @property
    def is_local(self) -> bool:
        if isinstance(self.locator, Path):
            return True
        return urlparse(self.locator).scheme in {"", "file"}


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    link: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "link": self.link}


@dataclass(frozen=True, slots=True)
class Link:
    title: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url}


@dataclass(slots=True)
class Record:
    """Metadata extracted from one proposal document."""

    id: str = ""
    title: str = ""
    link: str = ""
    authors: list[Person] = field(default_factory=list)
    review_managers: list[Person] = field(default_factory=list)
    status: Status = field(default_factory=Error)
    content_hash: str = ""
    implementation: list[Link] = field(default_factory=list)
    upcoming_feature_flag: Optional[str] = None
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)

    @classmethod
    def placeholder(cls, issue: Issue, *, content_hash: str = "") -> "Record":
        """Return the empty record emitted when a document cannot be read."""

        return cls(content_hash=content_hash, errors=[issue])

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "authors": [person.to_dict() for person in self.authors],
            "reviewManagers": [person.to_dict() for person in self.review_managers],
            "status": self.status.to_dict(),
            "sha": self.content_hash,
            "implementation": [link.to_dict() for link in self.implementation],
        }
        if self.upcoming_feature_flag:
            payload["upcomingFeatureFlag"] = self.upcoming_feature_flag
        if self.errors:
            payload["errors"] = [issue.to_dict() for issue in self.errors]
        if self.warnings:
            payload["warnings"] = [issue.to_dict() for issue in self.warnings]
        return payload


@dataclass(frozen=True, slots=True)
class SortableRecord:
    """Join unit pairing a record with its authoritative output position."""

    record: Record
    sort_index: int

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def content_hash(self) -> str:
        return self.record.content_hash


@dataclass(slots=True)
class AggregateResult:
    """Versioned envelope around the ordered record sequence."""

    creation_date: str
    tool_version: str
    commit: str
    implementation_versions: list[str]
    records: list[Record]
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "creationDate": self.creation_date,
            "toolVersion": self.tool_version,
            "commit": self.commit,
            "implementationVersions": list(self.implementation_versions),
            "proposals": [record.to_dict() for record in self.records],
            "schemaVersion": self.schema_version,
        }

    def to_json(self) -> str:
        """Serialise with sorted keys so identical runs produce identical bytes."""

        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"
