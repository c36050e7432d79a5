# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.resolver",
#   "purpose": "Partition current document specs into reusable and needs-extraction sets.",
#   "sections": [
#     {
#       "id": "resolvedspecs",
#       "name": "ResolvedSpecs",
#       "anchor": "class-resolvedspecs",
#       "kind": "class"
#     },
#     {
#       "id": "index-previous",
#       "name": "index_previous",
#       "anchor": "function-index-previous",
#       "kind": "function"
#     },
#     {
#       "id": "resolve-specs",
#       "name": "resolve_specs",
#       "anchor": "function-resolve-specs",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Reuse decisions for documents that did not change since the previous run.

A previous record is reusable for a current spec when the ids match, the
content hashes match, and the id was not forced. Each previous record can be
consumed at most once; whatever remains after the scan belongs to documents
that were removed from the listing and is dropped.

Previous records carry their position in the previous result list as their
sort index. When that position disagrees with the current spec's position the
listing was reordered, and :class:`SortIndexPolicy` decides whether the cached
record is still trusted. The module performs no I/O.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass, field

from .logging import get_logger, log_event
from .models import DocumentSpec, Record, SortableRecord
from .settings import SortIndexPolicy

__all__ = ["ResolvedSpecs", "index_previous", "resolve_specs"]

_LOGGER = get_logger(__name__, base_fields={"stage": "resolve"})


@dataclass(slots=True)
class ResolvedSpecs:
    """Outcome of :func:`resolve_specs`; unpacks as ``(needs_extraction, reusable)``."""

    needs_extraction: list[DocumentSpec] = field(default_factory=list)
    reusable: list[SortableRecord] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)
    reordered_ids: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[list]:
        yield self.needs_extraction
        yield self.reusable


def index_previous(previous: Sequence[Record]) -> dict[str, SortableRecord]:
    """Wrap previous records with their list position, keyed by id.

    A repeated id keeps its last occurrence.
    """

    return {
        record.id: SortableRecord(record, position) for position, record in enumerate(previous)
    }


def resolve_specs(
    specs: Sequence[DocumentSpec],
    previous: Sequence[Record],
    forced_ids: Collection[str] = (),
    *,
    policy: SortIndexPolicy = SortIndexPolicy.REEXTRACT,
) -> ResolvedSpecs:
    """Decide which specs must be extracted and which previous records carry over.

    Args:
        specs: Current listing in source order.
        previous: Records from the previous run, in their published order.
        forced_ids: Ids that bypass reuse even when the hash is unchanged.
        policy: Handling of a reusable record whose position changed.

    Returns:
        :class:`ResolvedSpecs` whose reusable records are tagged with the sort
        index of their current spec.
    """

    resolved = ResolvedSpecs()
    if not previous:
        resolved.needs_extraction = list(specs)
        return resolved

    forced = set(forced_ids)
    unconsumed = index_previous(previous)
    for spec in specs:
        cached = unconsumed.pop(spec.id, None)
        if cached is None or cached.content_hash != spec.content_hash or spec.id in forced:
            resolved.needs_extraction.append(spec)
            continue
        if cached.sort_index != spec.sort_index:
            resolved.reordered_ids.append(spec.id)
            log_event(
                _LOGGER,
                "warning",
                "Reusable record changed position in the listing",
                event="resolver.reordered",
                doc_id=spec.id,
                error_code="REORDERED",
                previous_index=cached.sort_index,
                current_index=spec.sort_index,
                policy=policy.value,
            )
            if policy is SortIndexPolicy.REEXTRACT:
                resolved.needs_extraction.append(spec)
                continue
        resolved.reusable.append(SortableRecord(cached.record, spec.sort_index))

    resolved.deleted_ids = sorted(doc_id for doc_id in unconsumed if doc_id)
    for doc_id in resolved.deleted_ids:
        log_event(_LOGGER, "debug", "Dropping record removed from the listing", doc_id=doc_id)

    if not resolved.needs_extraction and not resolved.deleted_ids:
        log_event(_LOGGER, "info", "No proposals require extraction. Using previous results.")
    log_event(
        _LOGGER,
        "info",
        "Resolved document specs",
        event="resolver.summary",
        reused=len(resolved.reusable),
        needs_extraction=len(resolved.needs_extraction),
        deleted=len(resolved.deleted_ids),
        reordered=len(resolved.reordered_ids),
    )
    return resolved
