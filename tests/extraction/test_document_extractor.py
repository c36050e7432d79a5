"""Field extractors and the document-level extraction unit."""

from __future__ import annotations

from EvolutionMetadata.Extraction import issues
from EvolutionMetadata.Extraction.extractor import extract_record
from EvolutionMetadata.Extraction.fields import (
    AuthorsExtractor,
    IdentityExtractor,
    ReviewManagersExtractor,
    UpcomingFeatureFlagExtractor,
)
from EvolutionMetadata.Extraction.markdown import parse_proposal
from EvolutionMetadata.Extraction.models import (
    DocumentSpec,
    Error,
    Implemented,
    Link,
    Person,
    Severity,
)
from tests.extraction.helpers import make_spec, render_proposal


def _fields(text):
    fields = parse_proposal(text).fields
    assert fields is not None
    return fields


class TestFieldExtractors:
    def test_identity_reads_id_and_link(self, processing_date):
        result = IdentityExtractor().extract(_fields(render_proposal(42)), processing_date)
        assert result.value is not None
        assert result.value.id == "SE-0042"
        assert result.value.link == "0042-example-proposal.md"

    def test_identity_keeps_last_path_component(self, processing_date):
        text = "# T\n\n* Proposal: [SE-0042](https://example.com/proposals/0042-x.md)\n"
        result = IdentityExtractor().extract(_fields(text), processing_date)
        assert result.value is not None
        assert result.value.link == "0042-x.md"

    def test_identity_rejects_malformed_id(self, processing_date):
        text = "# T\n\n* Proposal: [SE-42](0042-x.md)\n"
        result = IdentityExtractor().extract(_fields(text), processing_date)
        assert result.value is None
        assert result.errors == [issues.MISSING_OR_INVALID_ID_AND_LINK]

    def test_authors_from_links(self, processing_date):
        result = AuthorsExtractor().extract(_fields(render_proposal(1)), processing_date)
        assert result.value == [Person("Doug Gregor", "https://github.com/DougGregor")]

    def test_authors_from_plain_text(self, processing_date):
        text = render_proposal(1, authors="Jane Doe, John Roe and Ann Smith")
        result = AuthorsExtractor().extract(_fields(text), processing_date)
        assert [person.name for person in result.value] == ["Jane Doe", "John Roe", "Ann Smith"]

    def test_singular_author_label(self, processing_date):
        text = "# T\n\n* Proposal: [SE-0001](0001-x.md)\n* Author: Jane Doe\n"
        result = AuthorsExtractor().extract(_fields(text), processing_date)
        assert result.value == [Person("Jane Doe")]

    def test_missing_authors_is_error(self, processing_date):
        result = AuthorsExtractor().extract(_fields(render_proposal(1, authors=None)), processing_date)
        assert result.errors == [issues.MISSING_AUTHORS]

    def test_placeholder_review_manager_warns(self, processing_date):
        text = render_proposal(1, review_manager="TBD")
        result = ReviewManagersExtractor().extract(_fields(text), processing_date)
        assert result.value is None
        assert result.warnings == [issues.MISSING_REVIEW_MANAGERS]
        assert result.warnings[0].severity is Severity.WARNING

    def test_upcoming_feature_flag(self, processing_date):
        text = render_proposal(1, extra_fields=["Upcoming Feature Flag: `ExistentialAny`"])
        result = UpcomingFeatureFlagExtractor().extract(_fields(text), processing_date)
        assert result.value == "ExistentialAny"


class TestExtractRecord:
    def test_well_formed_document(self, processing_date):
        spec = DocumentSpec("https://example.invalid/0007-example-proposal.md", "abc", 6)
        text = render_proposal(
            7,
            extra_fields=["Implementation: [apple/swift#1](https://github.com/apple/swift/pull/1)"],
        )

        record = extract_record(text, spec, processing_date)

        assert record.id == "SE-0007"
        assert record.title == "Example proposal 7"
        assert record.link == "0007-example-proposal.md"
        assert record.content_hash == "abc"
        assert record.status == Implemented("5.9")
        assert record.review_managers == [Person("Joe Groff", "https://github.com/jckarter")]
        assert record.implementation == [
            Link("apple/swift#1", "https://github.com/apple/swift/pull/1")
        ]
        assert not record.has_errors
        assert not record.has_warnings

    def test_field_failures_do_not_abort(self, processing_date):
        text = render_proposal(3, status="Bogus Status", authors=None)

        record = extract_record(text, make_spec(3), processing_date)

        assert record.id == "SE-0003"
        assert record.title == "Example proposal 3"
        assert record.status == Error()
        assert record.errors == [issues.MISSING_AUTHORS, issues.MISSING_OR_INVALID_STATUS]

    def test_missing_status_defaults_to_error_variant(self, processing_date):
        record = extract_record(render_proposal(3, status=None), make_spec(3), processing_date)
        assert record.status == Error()
        assert record.warnings == [issues.MISSING_STATUS]
        assert not record.has_errors

    def test_missing_title_and_fields(self, processing_date):
        record = extract_record("Just prose.\n", make_spec(1), processing_date)
        assert record.errors == [issues.MISSING_TITLE, issues.MISSING_METADATA_FIELDS]

    def test_empty_document(self, processing_date):
        record = extract_record("   \n", make_spec(1), processing_date)
        assert record.errors == [issues.DOCUMENT_CONTAINS_NO_CONTENT]

    def test_link_must_match_filename(self, processing_date):
        text = render_proposal(5, slug="renamed")
        record = extract_record(text, make_spec(5), processing_date)
        assert issues.LINK_DOES_NOT_MATCH_FILENAME in record.warnings

    def test_custom_parser_is_used(self, processing_date):
        from EvolutionMetadata.Extraction.markdown import ProposalDocument

        record = extract_record(
            "ignored", make_spec(1), processing_date, parser=lambda text: ProposalDocument("Title")
        )
        assert record.title == "Title"
        assert record.errors == [issues.MISSING_METADATA_FIELDS]
