# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.scheduler",
#   "purpose": "Concurrent fan-out of document extraction units and deterministic join.",
#   "sections": [
#     {
#       "id": "extract-one",
#       "name": "extract_one",
#       "anchor": "function-extract-one",
#       "kind": "function"
#     },
#     {
#       "id": "extract-all",
#       "name": "extract_all",
#       "anchor": "function-extract-all",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Concurrent extraction of every document that needs re-parsing.

One unit of work is submitted per spec. A unit fetches the text, optionally
stages a copy for a snapshot, and runs the document extractor. Units share no
state: a failure inside one unit becomes a placeholder record in that spec's
slot and never reaches the batch.

The join runs on the calling thread, which is the only writer of the collected
list. Completion order is discarded; the combined sequence is stable-sorted by
``sort_index`` before it is returned.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import as_completed
from datetime import datetime
from pathlib import Path
from typing import Optional

from EvolutionMetadata.concurrency import create_executor

from . import issues
from .extractor import extract_record
from .logging import get_logger, log_event
from .markdown import StructureParser, parse_proposal
from .models import DocumentSpec, Record, SortableRecord
from .sources import DocumentFetcher

__all__ = ["extract_all", "extract_one"]

_LOGGER = get_logger(__name__, base_fields={"stage": "extract"})


def extract_one(
    spec: DocumentSpec,
    fetcher: DocumentFetcher,
    processing_date: datetime,
    *,
    staging_dir: Optional[Path] = None,
    parser: StructureParser = parse_proposal,
) -> SortableRecord:
    """Fetch, optionally stage, and extract a single document.

    Any exception raised while fetching or parsing is logged and converted to
    a placeholder record carrying :data:`issues.DOCUMENT_CONTAINS_NO_CONTENT`.
    """

    try:
        text = fetcher.fetch(spec)
        if staging_dir is not None:
            (staging_dir / spec.filename).write_text(text, encoding="utf-8")
        record = extract_record(text, spec, processing_date, parser=parser)
    except Exception as exc:
        log_event(
            _LOGGER,
            "error",
            "Document extraction failed; emitting placeholder record",
            event="scheduler.placeholder",
            doc_id=spec.id,
            error_code="PLACEHOLDER",
            locator=str(spec.locator),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        record = Record.placeholder(issues.DOCUMENT_CONTAINS_NO_CONTENT)
    return SortableRecord(record, spec.sort_index)


def extract_all(
    specs: Sequence[DocumentSpec],
    reusable: Sequence[SortableRecord],
    fetcher: DocumentFetcher,
    processing_date: datetime,
    *,
    staging_dir: Optional[Path] = None,
    max_workers: Optional[int] = None,
    parser: StructureParser = parse_proposal,
) -> list[SortableRecord]:
    """Extract ``specs`` concurrently and merge them with ``reusable``.

    Args:
        specs: Documents that need extraction.
        reusable: Records carried over from the previous run.
        fetcher: Source of document text.
        processing_date: Reference instant handed to every extractor.
        staging_dir: When set, each fetched text is written there under its
            filename. The directory is created if missing.
        max_workers: Optional bound on concurrent units. ``None`` runs one
            worker per spec.
        parser: Structural parser handed to the document extractor.

    Returns:
        Reused and extracted records sorted by ``sort_index``.
    """

    if staging_dir is not None:
        staging_dir.mkdir(parents=True, exist_ok=True)

    collected: list[SortableRecord] = []
    executor, needs_shutdown = create_executor(len(specs), max_workers)
    try:
        if executor is None:
            for spec in specs:
                collected.append(
                    extract_one(
                        spec, fetcher, processing_date, staging_dir=staging_dir, parser=parser
                    )
                )
        else:
            pending = [
                executor.submit(
                    extract_one,
                    spec,
                    fetcher,
                    processing_date,
                    staging_dir=staging_dir,
                    parser=parser,
                )
                for spec in specs
            ]
            for future in as_completed(pending):
                collected.append(future.result())
    finally:
        if needs_shutdown and executor is not None:
            executor.shutdown(wait=True)

    log_event(
        _LOGGER,
        "info",
        "Extraction complete",
        reused=len(reusable),
        extracted=len(collected),
    )
    return sorted([*reusable, *collected], key=lambda item: item.sort_index)
