"""Status, implementation version, and review period heuristics."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from EvolutionMetadata.Extraction import issues
from EvolutionMetadata.Extraction.fields.status import (
    StatusExtractor,
    dates_for_string,
    split_status,
    status_for_name,
    version_for_string,
)
from EvolutionMetadata.Extraction.markdown import parse_proposal
from EvolutionMetadata.Extraction.models import (
    AcceptedWithRevisions,
    ActiveReview,
    Error,
    Implemented,
    PreviewingManagerReview,
    ScheduledForReview,
    Withdrawn,
)
from tests.extraction.helpers import render_proposal


def _utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def _extract(status, processing_date):
    fields = parse_proposal(render_proposal(1, status=status)).fields
    assert fields is not None
    return StatusExtractor().extract(fields, processing_date)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Implemented (Swift 5.9)", ("Implemented", "Swift 5.9")),
        ("Withdrawn", ("Withdrawn", "")),
        ("Active Review (May 1 - May 14, 2024)", ("Active Review", "May 1 - May 14, 2024")),
        ("Implemented (Swift 5.9) (extra)", ("Implemented", "Swift 5.9")),
        ("  Rejected  ", ("Rejected", "")),
    ],
)
def test_split_status_uses_shortest_name(text, expected):
    """The name stops at the first parenthesised group."""

    assert split_status(text) == expected


@pytest.mark.parametrize(
    ("detail", "expected"),
    [
        ("Swift 5.9", "5.9"),
        ("Swift 5.10 with a trailing remark", "5.10"),
        ("", "none"),
        ("Swift Next", "Next"),
        ("4.2", "4.2"),
    ],
)
def test_version_for_string(detail, expected):
    assert version_for_string(detail) == expected


class TestDatesForString:
    def test_same_year_range(self):
        dates = dates_for_string("May 1 - May 14, 2024", _utc(2024, 5, 5))
        assert dates is not None
        assert (dates.start, dates.end) == ("2024-05-01", "2024-05-14")
        assert dates.review_ended is None

    def test_range_wraps_into_next_year(self):
        dates = dates_for_string("Dec 30 - Jan 3", _utc(2024, 5, 5))
        assert dates is not None
        assert (dates.start, dates.end) == ("2024-12-30", "2025-01-03")

    def test_single_month_applies_to_both_ends(self):
        dates = dates_for_string("January 5 - 10", _utc(2024, 1, 1))
        assert dates is not None
        assert (dates.start, dates.end) == ("2024-01-05", "2024-01-10")

    def test_ended_review_still_returns_dates(self):
        dates = dates_for_string("May 1 - May 14", _utc(2024, 6, 1))
        assert dates is not None
        assert dates.end == "2024-05-14"
        assert dates.review_ended is not None
        assert dates.review_ended.code == 102
        assert dates.review_ended.message == "Review period already ended on 2024-05-14."

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "TBD",
            "May 1 - June 3 - July 4",
            "May 1",
            "May 1 - 2 - 3",
            "Feb 30 - Mar 2",
        ],
    )
    def test_unparseable_periods(self, text):
        assert dates_for_string(text, _utc(2024, 1, 1)) is None

    def test_month_names_are_whole_words(self):
        """Words that merely contain a month name are not months."""

        assert dates_for_string("Mayday 1 - 3", _utc(2024, 1, 1)) is None


def test_status_for_name_vocabulary():
    assert status_for_name("Withdrawn") == Withdrawn()
    assert status_for_name("Implemented", version="5.9") == Implemented("5.9")
    assert status_for_name("Accepted with modifications") == AcceptedWithRevisions()
    assert status_for_name("Previewing") == PreviewingManagerReview()
    assert status_for_name("withdrawn") is None
    assert status_for_name("Bogus Status") is None


class TestStatusExtractor:
    """Literal cases for the status field."""

    def test_implemented_with_version(self, processing_date):
        result = _extract("Implemented (Swift 5.9)", processing_date)
        assert result.value == Implemented("5.9")
        assert not result.errors and not result.warnings

    def test_implemented_without_version(self, processing_date):
        result = _extract("Implemented", processing_date)
        assert result.value == Implemented("none")

    def test_active_review_in_progress(self):
        result = _extract("Active Review (May 1 - May 14, 2024)", _utc(2024, 5, 5))
        assert result.value == ActiveReview("2024-05-01", "2024-05-14")
        assert result.warnings == []

    def test_scheduled_review_wraps_year(self):
        result = _extract("Scheduled for Review (Dec 30 - Jan 3)", _utc(2024, 5, 5))
        assert result.value == ScheduledForReview("2024-12-30", "2025-01-03")

    def test_unknown_status_is_error(self, processing_date):
        result = _extract("Bogus Status", processing_date)
        assert result.value == Error()
        assert result.errors == [issues.MISSING_OR_INVALID_STATUS]

    def test_missing_status_field(self, processing_date):
        result = _extract(None, processing_date)
        assert result.value is None
        assert result.warnings == [issues.MISSING_STATUS]
        assert result.errors == []

    def test_review_without_dates_warns(self, processing_date):
        result = _extract("Active Review", processing_date)
        assert result.value == ActiveReview("", "")
        assert result.warnings == [issues.MISSING_OR_INVALID_REVIEW_DATES]

    def test_ended_review_warns(self):
        result = _extract("Active Review (May 1 - May 14)", _utc(2024, 6, 1))
        assert result.value == ActiveReview("2024-05-01", "2024-05-14")
        assert [issue.code for issue in result.warnings] == [102]
