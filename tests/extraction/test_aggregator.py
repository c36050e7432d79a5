"""Aggregate envelope, implementation versions, and expected-results comparison."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from EvolutionMetadata.Extraction.aggregator import (
    aggregate,
    compare_to_expected,
    format_creation_date,
    implementation_versions,
)
from EvolutionMetadata.Extraction.models import (
    Accepted,
    Implemented,
    Issue,
    Record,
    Severity,
    SortableRecord,
)
from EvolutionMetadata.Extraction.schemas import parse_aggregate


def test_implementation_versions_are_sorted_unique_and_non_empty():
    records = [
        Record(id="SE-0001", status=Implemented("5.9")),
        Record(id="SE-0002", status=Implemented("5.1")),
        Record(id="SE-0003", status=Implemented("5.9")),
        Record(id="SE-0004", status=Implemented("")),
        Record(id="SE-0005", status=Accepted()),
        Record(id="SE-0006", status=Implemented("none")),
    ]

    assert implementation_versions(records) == ["5.1", "5.9", "none"]


def test_creation_date_is_utc_iso8601():
    local = datetime(2024, 5, 5, 14, 30, 15, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert format_creation_date(local) == "2024-05-05T12:30:15Z"
    assert format_creation_date(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"


def test_aggregate_envelope(processing_date):
    records = [
        SortableRecord(Record(id="SE-0001", status=Implemented("5.9")), 0),
        SortableRecord(Record(id="SE-0002", status=Accepted()), 1),
    ]

    result = aggregate(records, processing_date=processing_date, commit="abc123", tool_version="1.2")

    assert [record.id for record in result.records] == ["SE-0001", "SE-0002"]
    assert result.implementation_versions == ["5.9"]
    assert result.commit == "abc123"
    assert result.tool_version == "1.2"
    assert result.creation_date == "2024-05-05T12:00:00Z"


def test_json_has_sorted_keys_and_round_trips(processing_date):
    record = Record(
        id="SE-0001",
        title="Title",
        status=Implemented("5.9"),
        warnings=[Issue(100, "Missing status.", Severity.WARNING)],
    )
    result = aggregate([record], processing_date=processing_date, commit="c", tool_version="t")

    text = result.to_json()
    payload = json.loads(text)

    assert list(payload) == sorted(payload)
    assert list(payload["proposals"][0]) == sorted(payload["proposals"][0])
    assert payload["proposals"][0]["status"] == {"state": "implemented", "version": "5.9"}
    assert payload["proposals"][0]["warnings"] == [
        {"code": 100, "kind": "warning", "message": "Missing status."}
    ]
    assert parse_aggregate(payload) == result


class TestCompareToExpected:
    def test_counts_passing_and_failing(self):
        records = [
            Record(id="SE-0001", title="A"),
            Record(id="SE-0002", title="B"),
            Record(id="SE-0003", title="C"),
        ]
        expected = [
            Record(id="SE-0001", title="A"),
            Record(id="SE-0002", title="changed"),
        ]

        summary = compare_to_expected(records, expected)

        assert summary.passing == 1
        assert summary.failing == 1
        assert summary.failing_ids == ["SE-0002"]
        assert summary.missing_ids == ["SE-0003"]

    def test_records_without_id_are_skipped(self):
        summary = compare_to_expected([Record()], [Record()])
        assert (summary.passing, summary.failing, summary.missing_ids) == (0, 0, [])
