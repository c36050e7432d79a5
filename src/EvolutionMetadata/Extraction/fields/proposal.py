"""Field extractors for the identity, people, and implementation headers.

These follow the same contract as
:class:`~EvolutionMetadata.Extraction.fields.status.StatusExtractor` with
simpler parsing rules: values come straight from the links, code spans, or
plain text of the header item.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .. import issues
from ..markdown import HeaderField, HeaderFields
from ..models import Link, Person
from .base import ExtractionResult

__all__ = [
    "AuthorsExtractor",
    "IdentityExtractor",
    "ImplementationExtractor",
    "ProposalIdentity",
    "ReviewManagersExtractor",
    "UpcomingFeatureFlagExtractor",
]

_PROPOSAL_ID_RE = re.compile(r"^SE-\d{4}$")
_NAME_SEPARATOR_RE = re.compile(r"\s*,\s*|\s+and\s+|\s*&\s*")
_PLACEHOLDER_NAMES = frozenset({"", "tbd", "n/a", "none"})


@dataclass(frozen=True, slots=True)
class ProposalIdentity:
    id: str
    link: str


def _people(header: Optional[HeaderField]) -> list[Person]:
    if header is None:
        return []
    if header.links:
        return [Person(name=text, link=url) for text, url in header.links if text]
    names = _NAME_SEPARATOR_RE.split(header.plain_text)
    return [Person(name=name.strip()) for name in names if name.strip().lower() not in _PLACEHOLDER_NAMES]


class IdentityExtractor:
    """Reads ``* Proposal: [SE-NNNN](NNNN-filename.md)``."""

    label = "Proposal"

    def extract(
        self, fields: HeaderFields, processing_date: datetime
    ) -> ExtractionResult[ProposalIdentity]:
        result: ExtractionResult[ProposalIdentity] = ExtractionResult()
        header = fields.get(self.label)
        if header is None or not header.links:
            result.errors.append(issues.MISSING_OR_INVALID_ID_AND_LINK)
            return result
        text, url = header.links[0]
        link = url.rstrip("/").rsplit("/", 1)[-1]
        if not _PROPOSAL_ID_RE.match(text) or not link:
            result.errors.append(issues.MISSING_OR_INVALID_ID_AND_LINK)
            return result
        result.value = ProposalIdentity(id=text, link=link)
        return result


class AuthorsExtractor:
    labels = ("Authors", "Author")

    def extract(self, fields: HeaderFields, processing_date: datetime) -> ExtractionResult[list[Person]]:
        people = _people(fields.first_of(self.labels))
        if not people:
            return ExtractionResult(errors=[issues.MISSING_AUTHORS])
        return ExtractionResult(value=people)


class ReviewManagersExtractor:
    labels = ("Review Manager", "Review Managers")

    def extract(self, fields: HeaderFields, processing_date: datetime) -> ExtractionResult[list[Person]]:
        people = _people(fields.first_of(self.labels))
        if not people:
            return ExtractionResult(warnings=[issues.MISSING_REVIEW_MANAGERS])
        return ExtractionResult(value=people)


class ImplementationExtractor:
    labels = ("Implementation", "Implementations")

    def extract(self, fields: HeaderFields, processing_date: datetime) -> ExtractionResult[list[Link]]:
        header = fields.first_of(self.labels)
        if header is None:
            return ExtractionResult(value=[])
        return ExtractionResult(value=[Link(title=text, url=url) for text, url in header.links])


class UpcomingFeatureFlagExtractor:
    label = "Upcoming Feature Flag"

    def extract(self, fields: HeaderFields, processing_date: datetime) -> ExtractionResult[str]:
        header = fields.get(self.label)
        if header is None:
            return ExtractionResult()
        flag = header.code[0] if header.code else header.plain_text
        return ExtractionResult(value=flag or None)
