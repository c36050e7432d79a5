# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.Extraction.sources",
#   "purpose": "Document fetchers and loaders for network, snapshot, and file sources.",
#   "sections": [
#     {
#       "id": "documentfetcher",
#       "name": "DocumentFetcher",
#       "anchor": "class-documentfetcher",
#       "kind": "class"
#     },
#     {
#       "id": "localfilefetcher",
#       "name": "LocalFileFetcher",
#       "anchor": "class-localfilefetcher",
#       "kind": "class"
#     },
#     {
#       "id": "httpdocumentfetcher",
#       "name": "HTTPDocumentFetcher",
#       "anchor": "class-httpdocumentfetcher",
#       "kind": "class"
#     },
#     {
#       "id": "routingfetcher",
#       "name": "RoutingFetcher",
#       "anchor": "class-routingfetcher",
#       "kind": "class"
#     },
#     {
#       "id": "sourceinputs",
#       "name": "SourceInputs",
#       "anchor": "class-sourceinputs",
#       "kind": "class"
#     },
#     {
#       "id": "load-network",
#       "name": "load_network",
#       "anchor": "function-load-network",
#       "kind": "function"
#     },
#     {
#       "id": "load-snapshot",
#       "name": "load_snapshot",
#       "anchor": "function-load-snapshot",
#       "kind": "function"
#     },
#     {
#       "id": "load-files",
#       "name": "load_files",
#       "anchor": "function-load-files",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Where document specs, previous results, and document text come from.

Three sources are supported:

- **Network**: branch information and the proposals directory listing from
  the GitHub API, documents from their download URLs, previous results from
  the published metadata URL.
- **Snapshot**: a ``*.evosnapshot`` directory laid out as::

      source-info.json          branch information (optional)
      proposal-listing.json     listing with hashes (optional)
      previous-results.json     records reused when hashes match (optional)
      expected-results.json     records compared at the end of a run (optional)
      proposals/NNNN-*.md       document text

  Without a listing, the sorted ``proposals/*.md`` files are used and hashed
  locally with the git blob algorithm.
- **Files**: an explicit list of markdown files, used by ``validate``.

Every loader fails before scheduling with an
:class:`~EvolutionMetadata.Extraction.errors.ExtractionJobError` subclass when
a required input cannot be read.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Protocol, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from pydantic import ValidationError

from .errors import (
    DocumentFetchError,
    ExtractionJobError,
    PreviousResultsError,
    SnapshotError,
)
from .io import git_blob_sha, load_json
from .logging import get_logger, log_event
from .models import DocumentSpec, Record
from .net import GitHubClient
from .schemas import parse_records

__all__ = [
    "DocumentFetcher",
    "FilesSource",
    "HTTPDocumentFetcher",
    "LocalFileFetcher",
    "NetworkSource",
    "RoutingFetcher",
    "SnapshotSource",
    "Source",
    "SourceInputs",
    "load_files",
    "load_network",
    "load_snapshot",
    "normalize_proposal_id",
    "records_from_payload",
    "specs_from_directory",
    "specs_from_listing",
]

_LOGGER = get_logger(__name__, base_fields={"stage": "source"})

SNAPSHOT_SUFFIX = ".evosnapshot"
SOURCE_INFO = "source-info.json"
PROPOSAL_LISTING = "proposal-listing.json"
PREVIOUS_RESULTS = "previous-results.json"
EXPECTED_RESULTS = "expected-results.json"
PROPOSALS_DIR = "proposals"

_PROPOSAL_ID_RE = re.compile(r"^(?:SE-)?(?P<number>\d{1,4})$", re.IGNORECASE)


# --- Fetchers ---


class DocumentFetcher(Protocol):
    """Returns the text of one document or raises."""

    def fetch(self, spec: DocumentSpec) -> str: ...


def _local_path(locator: Union[str, Path]) -> Path:
    if isinstance(locator, Path):
        return locator
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    return Path(locator)


class LocalFileFetcher:
    """Reads documents whose locator is a path or ``file:`` URL."""

    def fetch(self, spec: DocumentSpec) -> str:
        path = _local_path(spec.locator)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentFetchError(f"Unable to read {path}: {exc}", doc_id=spec.id) from exc


class HTTPDocumentFetcher:
    """Downloads documents through a shared :class:`GitHubClient`."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    def fetch(self, spec: DocumentSpec) -> str:
        return self.client.fetch_text(str(spec.locator), doc_id=spec.id)


class RoutingFetcher:
    """Local specs go to ``local``; everything else to ``remote``."""

    def __init__(
        self,
        local: Optional[DocumentFetcher] = None,
        remote: Optional[DocumentFetcher] = None,
    ) -> None:
        self.local = local if local is not None else LocalFileFetcher()
        self.remote = remote

    def fetch(self, spec: DocumentSpec) -> str:
        if spec.is_local:
            return self.local.fetch(spec)
        if self.remote is None:
            raise DocumentFetchError(
                "No remote fetcher configured", doc_id=spec.id, url=str(spec.locator)
            )
        return self.remote.fetch(spec)


# --- Source descriptions ---


@dataclass(frozen=True, slots=True)
class NetworkSource:
    pass


@dataclass(frozen=True, slots=True)
class SnapshotSource:
    path: Path


@dataclass(frozen=True, slots=True)
class FilesSource:
    paths: tuple[Path, ...]


Source = Union[NetworkSource, SnapshotSource, FilesSource]


@dataclass(slots=True)
class SourceInputs:
    """Everything a job reads before scheduling."""

    specs: list[DocumentSpec]
    previous: list[Record] = field(default_factory=list)
    expected: Optional[list[Record]] = None
    branch_info: Optional[dict[str, Any]] = None
    listing: Optional[list[dict[str, Any]]] = None

    @property
    def commit(self) -> str:
        if not self.branch_info:
            return ""
        commit = self.branch_info.get("commit") or {}
        return str(commit.get("sha", ""))


# --- Helpers ---


def normalize_proposal_id(value: str) -> str:
    """Normalise ``"1"``, ``"0001"``, or ``"se-0001"`` to ``"SE-0001"``.

    Values that do not look like proposal ids are returned unchanged.
    """

    match = _PROPOSAL_ID_RE.match(value.strip())
    if match is None:
        return value.strip()
    return f"SE-{int(match.group('number')):04d}"


def records_from_payload(payload: Any) -> list[Record]:
    """Decode a bare record list or an aggregate envelope with ``proposals``.

    Raises:
        pydantic.ValidationError: If the payload is not in the published layout.
    """

    return parse_records(payload)


def specs_from_listing(
    items: Iterable[dict[str, Any]], *, base: Optional[Path] = None
) -> list[DocumentSpec]:
    """Build specs from GitHub content items, keeping markdown files only.

    With ``base`` the item ``path`` is resolved under it; otherwise the item's
    ``download_url`` is used.
    """

    specs: list[DocumentSpec] = []
    for item in items:
        name = str(item.get("name") or Path(str(item.get("path", ""))).name)
        if not name.endswith(".md"):
            continue
        locator: Union[str, Path]
        if base is not None:
            locator = base / str(item.get("path") or f"{PROPOSALS_DIR}/{name}")
        else:
            locator = str(item.get("download_url") or "")
        specs.append(DocumentSpec(locator, str(item.get("sha", "")), len(specs)))
    return specs


def specs_from_directory(directory: Path) -> list[DocumentSpec]:
    paths = sorted(directory.glob("*.md"), key=lambda path: path.name)
    return [DocumentSpec(path, git_blob_sha(path), index) for index, path in enumerate(paths)]


def _decode(path: Path, error_cls: type[ExtractionJobError]) -> Any:
    try:
        return load_json(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise error_cls(f"Unable to read {path.name}", path=path, cause=exc) from exc


# --- Loaders ---


def load_network(client: GitHubClient, *, ignore_previous: bool = False) -> SourceInputs:
    """Read branch, listing, and (unless ignored) previous results over HTTP."""

    previous: list[Record] = []
    if not ignore_previous:
        try:
            previous = records_from_payload(client.fetch_previous_results())
        except ValidationError as exc:
            raise PreviousResultsError(
                "Previous results are malformed", url=client.settings.previous_results_url, cause=exc
            ) from exc
    branch = client.fetch_branch()
    commit = str(branch["commit"].get("sha", ""))
    listing = client.fetch_proposal_listing(commit)
    specs = specs_from_listing(listing)
    log_event(
        _LOGGER,
        "info",
        "Loaded network source",
        commit=commit,
        proposals=len(specs),
        previous=len(previous),
    )
    return SourceInputs(
        specs=specs, previous=previous, branch_info=branch, listing=listing
    )


def load_snapshot(path: Path, *, ignore_previous: bool = False) -> SourceInputs:
    """Read a snapshot directory laid out as described in the module docstring."""

    proposals_dir = path / PROPOSALS_DIR
    if not proposals_dir.is_dir():
        raise SnapshotError("Snapshot has no proposals directory", path=proposals_dir)

    branch_info = _decode(path / SOURCE_INFO, SnapshotError)
    listing = _decode(path / PROPOSAL_LISTING, SnapshotError)
    directory_specs = specs_from_directory(proposals_dir)
    if listing is not None:
        if not isinstance(listing, list):
            raise SnapshotError("Proposal listing is not a list", path=path / PROPOSAL_LISTING)
        specs = specs_from_listing(listing, base=path)
        if len(specs) != len(directory_specs):
            log_event(
                _LOGGER,
                "warning",
                "Number of proposals in proposals directory does not match proposal-listing.json",
                doc_id="*",
                error_code="LISTING_MISMATCH",
                listed=len(specs),
                on_disk=len(directory_specs),
            )
    else:
        specs = directory_specs

    previous: list[Record] = []
    if not ignore_previous:
        try:
            previous = records_from_payload(_decode(path / PREVIOUS_RESULTS, PreviousResultsError))
        except ValidationError as exc:
            raise PreviousResultsError(
                "Previous results are malformed", path=path / PREVIOUS_RESULTS, cause=exc
            ) from exc

    expected_payload = _decode(path / EXPECTED_RESULTS, SnapshotError)
    try:
        expected = records_from_payload(expected_payload) if expected_payload is not None else None
    except ValidationError as exc:
        raise SnapshotError(
            "Expected results are malformed", path=path / EXPECTED_RESULTS, cause=exc
        ) from exc

    log_event(
        _LOGGER,
        "info",
        "Loaded snapshot source",
        snapshot=str(path),
        listing_found=listing is not None,
        previous_found=bool(previous),
        expected_found=expected is not None,
        proposals=len(specs),
    )
    return SourceInputs(
        specs=specs,
        previous=previous,
        expected=expected,
        branch_info=branch_info if isinstance(branch_info, dict) else None,
        listing=listing,
    )


def load_files(paths: Sequence[Path]) -> SourceInputs:
    """Specs for an explicit file list; every file is extracted."""

    missing = [path for path in paths if not path.is_file()]
    if missing:
        raise SnapshotError(f"File not found: {missing[0]}", path=missing[0])
    specs = [DocumentSpec(path, git_blob_sha(path), index) for index, path in enumerate(paths)]
    return SourceInputs(specs=specs)
