# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.job",
#   "purpose": "Extraction job orchestration: inputs, pipeline, diagnostics, and outputs.",
#   "sections": [
#     {
#       "id": "outputkind",
#       "name": "OutputKind",
#       "anchor": "class-outputkind",
#       "kind": "class"
#     },
#     {
#       "id": "output",
#       "name": "Output",
#       "anchor": "class-output",
#       "kind": "class"
#     },
#     {
#       "id": "jobresult",
#       "name": "JobResult",
#       "anchor": "class-jobresult",
#       "kind": "class"
#     },
#     {
#       "id": "extractionjob",
#       "name": "ExtractionJob",
#       "anchor": "class-extractionjob",
#       "kind": "class"
#     },
#     {
#       "id": "make-extraction-job",
#       "name": "make_extraction_job",
#       "anchor": "function-make-extraction-job",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Extraction job orchestration.

An :class:`ExtractionJob` captures every input of one run (document specs,
previous and expected results, forced ids, processing date) together with the
requested output. :func:`make_extraction_job` builds one from a source:

- ``NetworkSource``: GitHub listing at the branch head, previous results from
  the published metadata.
- ``SnapshotSource``: a local ``*.evosnapshot`` directory.
- ``FilesSource``: an explicit list of proposal files.

:meth:`ExtractionJob.run` then executes resolve → extract → aggregate, runs
the expected-results comparison when the source supplied expected records, and
writes the output. All job-level input failures are raised while the job is
being built, before any document is scheduled.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from .aggregator import ComparisonSummary, aggregate, compare_to_expected
from .io import move_directory, write_json, write_text
from .logging import get_logger, log_event
from .markdown import StructureParser, parse_proposal
from .models import AggregateResult
from .net import GitHubClient
from .report import validation_report
from .resolver import ResolvedSpecs, resolve_specs
from .scheduler import extract_all
from .settings import ExtractionSettings, get_settings
from .sources import (
    EXPECTED_RESULTS,
    PROPOSAL_LISTING,
    PROPOSALS_DIR,
    SOURCE_INFO,
    DocumentFetcher,
    FilesSource,
    HTTPDocumentFetcher,
    NetworkSource,
    RoutingFetcher,
    SnapshotSource,
    Source,
    SourceInputs,
    load_files,
    load_network,
    load_snapshot,
    normalize_proposal_id,
)

__all__ = [
    "ExtractionJob",
    "JobResult",
    "Output",
    "OutputKind",
    "make_extraction_job",
    "proposals_list_path",
]

_LOGGER = get_logger(__name__, base_fields={"stage": "job"})


class OutputKind(str, Enum):
    """Where the results of a run go."""

    METADATA_JSON = "metadata-json"
    SNAPSHOT = "snapshot"
    VALIDATION_REPORT = "validation-report"
    NONE = "none"


_PATH_KINDS = frozenset({OutputKind.METADATA_JSON, OutputKind.SNAPSHOT})


@dataclass(frozen=True, slots=True)
class Output:
    kind: OutputKind
    path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.kind in _PATH_KINDS and self.path is None:
            raise ValueError(f"Output kind '{self.kind.value}' requires a path")

    @property
    def destination(self) -> Path:
        """The output path; ``ValueError`` for kinds that write nothing to disk."""

        if self.path is None:
            raise ValueError(f"Output kind '{self.kind.value}' has no path")
        return self.path

    @classmethod
    def metadata_json(cls, path: Path) -> "Output":
        return cls(OutputKind.METADATA_JSON, Path(path))

    @classmethod
    def snapshot(cls, path: Path) -> "Output":
        return cls(OutputKind.SNAPSHOT, Path(path))

    @classmethod
    def validation_report(cls) -> "Output":
        return cls(OutputKind.VALIDATION_REPORT)

    @classmethod
    def none(cls) -> "Output":
        return cls(OutputKind.NONE)


@dataclass(slots=True)
class JobResult:
    """What a run produced, for callers that want more than the written output."""

    aggregate: AggregateResult
    resolved: ResolvedSpecs
    report: str = ""
    comparison: Optional[ComparisonSummary] = None


@dataclass(slots=True)
class ExtractionJob:
    """All inputs and the output destination of one extraction run."""

    inputs: SourceInputs
    output: Output
    fetcher: DocumentFetcher
    settings: ExtractionSettings
    forced_ids: frozenset[str] = frozenset()
    processing_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    parser: StructureParser = parse_proposal
    client: Optional[GitHubClient] = None
    owns_client: bool = False

    def close(self) -> None:
        """Close the HTTP client if this job created it."""

        if self.owns_client and self.client is not None:
            self.client.close()

    def __enter__(self) -> "ExtractionJob":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def run(self) -> JobResult:
        """Resolve, extract, aggregate, compare, and write the output."""

        if self.output.kind is OutputKind.SNAPSHOT:
            with tempfile.TemporaryDirectory(prefix="evometa-") as tmp:
                staging_dir = Path(tmp) / PROPOSALS_DIR
                result = self._extract(staging_dir)
                self._write_snapshot(result.aggregate, staging_dir)
            return result

        result = self._extract(None)
        if self.output.kind is OutputKind.METADATA_JSON:
            destination = self.output.destination
            write_text(destination, result.aggregate.to_json())
            # Consumers of the older layout read the bare proposals list.
            proposals_path = proposals_list_path(destination)
            write_json(proposals_path, [record.to_dict() for record in result.aggregate.records])
            log_event(
                _LOGGER,
                "info",
                "Wrote metadata",
                event="job.output",
                path=str(destination),
                proposals_path=str(proposals_path),
            )
        elif self.output.kind is OutputKind.VALIDATION_REPORT:
            flagged = sum(1 for record in result.aggregate.records if record.has_errors or record.has_warnings)
            log_event(_LOGGER, "info", "Built validation report", event="job.output", records_with_issues=flagged)
        return result

    def _extract(self, staging_dir: Optional[Path]) -> JobResult:
        resolved = resolve_specs(
            self.inputs.specs,
            self.inputs.previous,
            self.forced_ids,
            policy=self.settings.sort_index_policy,
        )
        records = extract_all(
            resolved.needs_extraction,
            resolved.reusable,
            self.fetcher,
            self.processing_date,
            staging_dir=staging_dir,
            max_workers=self.settings.max_workers,
            parser=self.parser,
        )
        result = aggregate(
            records,
            processing_date=self.processing_date,
            commit=self.inputs.commit,
            tool_version=self.settings.tool_version,
        )
        comparison = None
        if self.inputs.expected is not None:
            comparison = compare_to_expected(result.records, self.inputs.expected)
            log_event(
                _LOGGER,
                "info",
                "Compared to expected results",
                event="job.compare",
                passing=comparison.passing,
                failing=comparison.failing,
                missing=len(comparison.missing_ids),
            )
        return JobResult(
            aggregate=result,
            resolved=resolved,
            report=validation_report(result.records),
            comparison=comparison,
        )

    def _write_snapshot(self, result: AggregateResult, staging_dir: Path) -> None:
        destination = self.output.destination
        destination.mkdir(parents=True, exist_ok=True)
        staging_dir.mkdir(parents=True, exist_ok=True)
        move_directory(staging_dir, destination / PROPOSALS_DIR)
        if self.inputs.branch_info is not None:
            write_json(destination / SOURCE_INFO, self.inputs.branch_info)
        if self.inputs.listing is not None:
            write_json(destination / PROPOSAL_LISTING, self.inputs.listing)
        write_json(destination / EXPECTED_RESULTS, [record.to_dict() for record in result.records])
        log_event(_LOGGER, "info", "Wrote snapshot", event="job.output", path=str(destination))


def proposals_list_path(metadata_path: Path) -> Path:
    """Sibling file holding the bare proposals list, e.g. ``evolution.proposals.json``."""

    return metadata_path.with_name(f"{metadata_path.stem}.proposals{metadata_path.suffix or '.json'}")


def _forced(ids: Iterable[str]) -> frozenset[str]:
    return frozenset(normalize_proposal_id(value) for value in ids if value.strip())


def make_extraction_job(
    source: Source,
    output: Output,
    *,
    settings: Optional[ExtractionSettings] = None,
    ignore_previous: bool = False,
    forced_ids: Iterable[str] = (),
    processing_date: Optional[datetime] = None,
    client: Optional[GitHubClient] = None,
    fetcher: Optional[DocumentFetcher] = None,
) -> ExtractionJob:
    """Load the inputs for ``source`` and return a ready-to-run job.

    Snapshot output always extracts every document so the captured
    ``proposals`` directory is complete.

    Raises:
        ExtractionJobError: When a required input cannot be obtained.
    """

    settings = settings or get_settings()
    ignore_previous = ignore_previous or output.kind is OutputKind.SNAPSHOT

    owned = False
    if isinstance(source, NetworkSource):
        owned = client is None
        client = client or GitHubClient(settings)
        try:
            inputs = load_network(client, ignore_previous=ignore_previous)
        except Exception:
            if owned:
                client.close()
            raise
    elif isinstance(source, SnapshotSource):
        inputs = load_snapshot(Path(source.path), ignore_previous=ignore_previous)
    elif isinstance(source, FilesSource):
        inputs = load_files([Path(path) for path in source.paths])
    else:
        raise TypeError(f"Unsupported source: {source!r}")

    if fetcher is None:
        remote = HTTPDocumentFetcher(client) if client is not None else None
        fetcher = RoutingFetcher(remote=remote)

    return ExtractionJob(
        inputs=inputs,
        output=output,
        fetcher=fetcher,
        settings=settings,
        forced_ids=_forced(forced_ids),
        processing_date=processing_date or datetime.now(timezone.utc),
        client=client,
        owns_client=owned,
    )
