"""Validation of saved metadata before records are reused."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from EvolutionMetadata.Extraction.models import (
    ActiveReview,
    Error,
    Implemented,
    Issue,
    Link,
    Person,
    Record,
    Severity,
)
from EvolutionMetadata.Extraction.schemas import parse_aggregate, parse_records


def test_published_record_decodes_into_dataclasses():
    payload = [
        {
            "id": "SE-0001",
            "title": "Allow keywords",
            "link": "0001-keywords-as-argument-labels.md",
            "authors": [{"name": "Doug Gregor", "link": "https://github.com/DougGregor"}],
            "reviewManagers": [{"name": "Joe Groff", "link": ""}],
            "status": {"state": "implemented", "version": "2.2"},
            "sha": "abc",
            "implementation": [{"title": "apple/swift#1", "url": "https://github.com/apple/swift/pull/1"}],
            "upcomingFeatureFlag": "ExistentialAny",
            "warnings": [{"code": 101, "kind": "warning", "message": "Missing review manager(s)."}],
            "trackingBugs": [{"id": "SR-1"}],
        }
    ]

    (record,) = parse_records(payload)

    assert record == Record(
        id="SE-0001",
        title="Allow keywords",
        link="0001-keywords-as-argument-labels.md",
        authors=[Person("Doug Gregor", "https://github.com/DougGregor")],
        review_managers=[Person("Joe Groff")],
        status=Implemented("2.2"),
        content_hash="abc",
        implementation=[Link("apple/swift#1", "https://github.com/apple/swift/pull/1")],
        upcoming_feature_flag="ExistentialAny",
        warnings=[Issue(101, "Missing review manager(s).", Severity.WARNING)],
    )


def test_status_variants_keep_their_payload():
    (record,) = parse_records(
        [{"id": "SE-0002", "status": {"state": "activeReview", "start": "2024-05-01", "end": "2024-05-14"}}]
    )
    assert record.status == ActiveReview("2024-05-01", "2024-05-14")


def test_minimal_record_defaults_to_error_status():
    (record,) = parse_records([{"id": "SE-0001", "sha": "s1"}])
    assert record.status == Error()
    assert record.authors == []


def test_envelope_and_bare_list_are_equivalent():
    item = {"id": "SE-0001", "sha": "s1"}
    assert parse_records({"proposals": [item], "commit": "c"}) == parse_records([item])
    assert parse_records(None) == []


@pytest.mark.parametrize(
    "payload",
    [
        "bogus",
        ["SE-0001"],
        [{"id": "SE-0001", "status": "implemented"}],
        [{"id": "SE-0001", "status": {"state": "shipped"}}],
        [{"id": "SE-0001", "authors": "Doug"}],
        [{"id": "SE-0001", "errors": [{"message": "no code"}]}],
        [{"id": 1}],
    ],
)
def test_malformed_payloads_raise_validation_error(payload):
    with pytest.raises(ValidationError):
        parse_records(payload)


def test_parse_aggregate_reads_envelope_fields():
    result = parse_aggregate(
        {
            "creationDate": "2024-05-05T12:00:00Z",
            "toolVersion": "0.4.0",
            "commit": "c",
            "implementationVersions": ["5.9"],
            "proposals": [],
            "schemaVersion": "1.0.0",
        }
    )

    assert result.creation_date == "2024-05-05T12:00:00Z"
    assert result.implementation_versions == ["5.9"]
    assert result.records == []
