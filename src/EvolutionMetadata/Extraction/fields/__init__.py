"""Header field extractors used by the document extractor."""

from .base import ExtractionResult, FieldExtractor
from .proposal import (
    AuthorsExtractor,
    IdentityExtractor,
    ImplementationExtractor,
    ProposalIdentity,
    ReviewManagersExtractor,
    UpcomingFeatureFlagExtractor,
)
from .status import StatusExtractor

__all__ = [
    "AuthorsExtractor",
    "ExtractionResult",
    "FieldExtractor",
    "IdentityExtractor",
    "ImplementationExtractor",
    "ProposalIdentity",
    "ReviewManagersExtractor",
    "StatusExtractor",
    "UpcomingFeatureFlagExtractor",
]
