"""Result aggregation and the expected-results diagnostic pass."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .logging import get_logger, log_event
from .models import AggregateResult, Implemented, Record, SortableRecord

__all__ = [
    "ComparisonSummary",
    "aggregate",
    "compare_to_expected",
    "format_creation_date",
    "implementation_versions",
]

_LOGGER = get_logger(__name__, base_fields={"stage": "aggregate"})


def implementation_versions(records: Iterable[Record]) -> list[str]:
    """Sorted, de-duplicated, non-empty versions of ``Implemented`` records."""

    versions = {
        record.status.version
        for record in records
        if isinstance(record.status, Implemented) and record.status.version
    }
    return sorted(versions)


def format_creation_date(processing_date: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix and whole seconds."""

    if processing_date.tzinfo is None:
        processing_date = processing_date.replace(tzinfo=timezone.utc)
    utc = processing_date.astimezone(timezone.utc).replace(microsecond=0)
    return utc.isoformat().replace("+00:00", "Z")


def aggregate(
    records: Sequence[SortableRecord] | Sequence[Record],
    *,
    processing_date: datetime,
    commit: str = "",
    tool_version: str = "",
) -> AggregateResult:
    """Build the aggregate envelope from the order-restored record sequence."""

    ordered = [item.record if isinstance(item, SortableRecord) else item for item in records]
    versions = implementation_versions(ordered)
    log_event(_LOGGER, "debug", "Computed implementation versions", versions=versions)
    return AggregateResult(
        creation_date=format_creation_date(processing_date),
        tool_version=tool_version,
        commit=commit,
        implementation_versions=versions,
        records=ordered,
    )


@dataclass(slots=True)
class ComparisonSummary:
    """Counts from comparing extracted records against expected ones."""

    passing: int = 0
    failing: int = 0
    missing_ids: list[str] = field(default_factory=list)
    failing_ids: list[str] = field(default_factory=list)


def compare_to_expected(
    records: Iterable[Record], expected: Iterable[Record]
) -> ComparisonSummary:
    """Match records to ``expected`` by id and count structural equality.

    Records without an id are skipped. Ids missing from ``expected`` are
    reported, never raised.
    """

    expected_by_id = {item.id: item for item in expected}
    summary = ComparisonSummary()
    for record in records:
        if not record.id:
            continue
        wanted = expected_by_id.get(record.id)
        if wanted is None:
            summary.missing_ids.append(record.id)
            log_event(_LOGGER, "info", f"Could not find id {record.id}", doc_id=record.id)
            continue
        if record == wanted:
            summary.passing += 1
        else:
            summary.failing += 1
            summary.failing_ids.append(record.id)
    return summary
