"""Builders shared by the extraction tests."""

from __future__ import annotations

import random
import threading
import time
from typing import Iterable, Optional

from EvolutionMetadata.Extraction.models import DocumentSpec


def render_proposal(
    number: int,
    *,
    title: Optional[str] = None,
    status: Optional[str] = "Implemented (Swift 5.9)",
    authors: Optional[str] = "[Doug Gregor](https://github.com/DougGregor)",
    review_manager: Optional[str] = "[Joe Groff](https://github.com/jckarter)",
    slug: str = "example-proposal",
    extra_fields: Iterable[str] = (),
) -> str:
    """Render a proposal document with the usual header block."""

    filename = f"{number:04d}-{slug}.md"
    lines = [f"# {title or f'Example proposal {number}'}", ""]
    lines.append(f"* Proposal: [SE-{number:04d}]({filename})")
    if authors is not None:
        lines.append(f"* Authors: {authors}")
    if review_manager is not None:
        lines.append(f"* Review Manager: {review_manager}")
    if status is not None:
        lines.append(f"* Status: **{status}**")
    lines.extend(f"* {item}" for item in extra_fields)
    lines.extend(["", "## Introduction", "", "Body text."])
    return "\n".join(lines) + "\n"


def make_spec(
    number: int, *, sort_index: Optional[int] = None, content_hash: str = ""
) -> DocumentSpec:
    locator = f"https://example.invalid/proposals/{number:04d}-example-proposal.md"
    return DocumentSpec(
        locator,
        content_hash or f"sha-{number}",
        number - 1 if sort_index is None else sort_index,
    )


class FakeFetcher:
    """In-memory fetcher recording calls, with optional jitter and failures."""

    def __init__(
        self,
        texts: dict[str, str],
        *,
        seed: Optional[int] = None,
        failing: Iterable[str] = (),
    ) -> None:
        self.texts = texts
        self.failing = set(failing)
        self.calls: list[str] = []
        self._lock = threading.Lock()
        rng = random.Random(seed) if seed is not None else None
        self._delays = {doc_id: (rng.uniform(0, 0.02) if rng else 0.0) for doc_id in texts}

    def fetch(self, spec: DocumentSpec) -> str:
        with self._lock:
            self.calls.append(spec.id)
        delay = self._delays.get(spec.id, 0.0)
        if delay:
            time.sleep(delay)
        if spec.id in self.failing:
            raise RuntimeError(f"simulated failure for {spec.id}")
        return self.texts[spec.id]
