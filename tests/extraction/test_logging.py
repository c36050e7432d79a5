"""Structured logging helpers."""

from __future__ import annotations

import io
import json
import logging

import pytest

from EvolutionMetadata.Extraction.logging import (
    ROOT_LOGGER_NAME,
    JSONFormatter,
    configure_logging,
    get_logger,
    log_event,
)


@pytest.fixture
def captured():
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.tests")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield stream
    finally:
        logger.removeHandler(handler)


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_bound_fields_reach_json_output(captured):
    logger = get_logger(f"{ROOT_LOGGER_NAME}.tests", base_fields={"stage": "extract"})

    log_event(logger, "info", "Extraction complete", extracted=3)

    (record,) = _records(captured)
    assert record["message"] == "Extraction complete"
    assert record["stage"] == "extract"
    assert record["extracted"] == 3
    assert record["level"] == "INFO"


def test_warning_events_carry_identity_fields(captured):
    logger = get_logger(f"{ROOT_LOGGER_NAME}.tests")

    log_event(logger, "warning", "Something odd", error_code="reordered")

    (record,) = _records(captured)
    assert record["doc_id"] == "unknown"
    assert record["error_code"] == "REORDERED"


def test_unknown_level_raises():
    with pytest.raises(AttributeError):
        log_event(get_logger(f"{ROOT_LOGGER_NAME}.tests"), "loud", "nope")


def test_configure_logging_replaces_its_handler():
    configure_logging("DEBUG", "json")
    configure_logging("INFO", "console")

    root = logging.getLogger(ROOT_LOGGER_NAME)
    managed = [handler for handler in root.handlers if getattr(handler, "_evometa_managed", False)]
    assert len(managed) == 1
    assert not isinstance(managed[0].formatter, JSONFormatter)
    assert root.level == logging.INFO
