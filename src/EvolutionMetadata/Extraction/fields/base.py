"""Contract shared by every header field extractor.

A field extractor consumes the parsed header block of one document plus the
processing date and returns an :class:`ExtractionResult`: the typed value (or
``None``) together with the warnings and errors raised along the way. A
missing or unparseable field is never an exception; the document extractor
merges the issues into the record and substitutes a default value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Optional, Protocol, TypeVar

from ..markdown import HeaderFields
from ..models import Issue

__all__ = ["ExtractionResult", "FieldExtractor", "T"]

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass(slots=True)
class ExtractionResult(Generic[T]):
    """Typed value plus the issues raised while producing it."""

    value: Optional[T] = None
    warnings: list[Issue] = field(default_factory=list)
    errors: list[Issue] = field(default_factory=list)


class FieldExtractor(Protocol[T_co]):
    """Turns ``(header fields, processing date)`` into an extraction result."""

    def extract(
        self, fields: HeaderFields, processing_date: datetime
    ) -> ExtractionResult[T_co]: ...
