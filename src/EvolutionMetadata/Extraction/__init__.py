# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.__init__",
#   "purpose": "Public facade of the proposal metadata extraction pipeline.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Proposal metadata extraction pipeline.

Pipeline stages, leaves first:

- :mod:`.fields` – field extractors, including the status and review-period
  heuristics.
- :mod:`.extractor` – one document's text to one record.
- :mod:`.resolver` – reuse decisions against the previous run.
- :mod:`.scheduler` – concurrent fan-out and deterministic join.
- :mod:`.aggregator` – aggregate envelope and expected-results comparison.
- :mod:`.job` – orchestration over network, snapshot, or file sources.

The command-line entry point lives in :mod:`.cli` and is not imported here.
"""

from .aggregator import ComparisonSummary, aggregate, compare_to_expected
from .extractor import extract_record
from .job import ExtractionJob, JobResult, Output, OutputKind, make_extraction_job
from .models import AggregateResult, DocumentSpec, Issue, Record, Severity, SortableRecord
from .report import validation_report
from .resolver import ResolvedSpecs, resolve_specs
from .scheduler import extract_all
from .settings import ExtractionSettings, SortIndexPolicy, get_settings
from .sources import FilesSource, NetworkSource, SnapshotSource

__all__ = [
    "AggregateResult",
    "ComparisonSummary",
    "DocumentSpec",
    "ExtractionJob",
    "ExtractionSettings",
    "FilesSource",
    "Issue",
    "JobResult",
    "NetworkSource",
    "Output",
    "OutputKind",
    "Record",
    "ResolvedSpecs",
    "Severity",
    "SnapshotSource",
    "SortIndexPolicy",
    "SortableRecord",
    "aggregate",
    "compare_to_expected",
    "extract_all",
    "extract_record",
    "get_settings",
    "make_extraction_job",
    "resolve_specs",
    "validation_report",
]
