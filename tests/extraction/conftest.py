"""Shared pytest fixtures for the extraction test suite."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from EvolutionMetadata.Extraction.logging import ROOT_LOGGER_NAME
from EvolutionMetadata.Extraction.settings import reset_settings
from tests.extraction.helpers import render_proposal


@pytest.fixture(autouse=True)
def _restore_environ() -> None:
    """Snapshot environment variables and cached settings, restore after each test."""

    original = os.environ.copy()
    reset_settings()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)
        reset_settings()


@pytest.fixture(autouse=True)
def _restore_cwd() -> None:
    """Ensure tests leave the current working directory unchanged."""

    original_cwd = Path.cwd()
    try:
        yield
    finally:
        os.chdir(original_cwd)


@pytest.fixture(autouse=True)
def _restore_logging() -> None:
    """Drop handlers installed by ``configure_logging`` during a test."""

    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level, propagate = root.level, root.propagate
    try:
        yield
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
        root.setLevel(level)
        root.propagate = propagate


@pytest.fixture
def processing_date() -> datetime:
    return datetime(2024, 5, 5, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def proposal_markdown() -> Callable[..., str]:
    """Factory fixture returning proposal markdown for a proposal number."""

    return render_proposal


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    """Snapshot directory with three proposals and no listing."""

    root = tmp_path / "sample.evosnapshot"
    proposals = root / "proposals"
    proposals.mkdir(parents=True)
    for number in (1, 2, 3):
        (proposals / f"{number:04d}-example-proposal.md").write_text(
            render_proposal(number), encoding="utf-8"
        )
    return root
