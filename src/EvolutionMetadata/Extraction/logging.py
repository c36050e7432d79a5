"""
Structured logging utilities for extraction jobs.

Every pipeline module obtains its logger through :func:`get_logger` and emits
events through :func:`log_event`, so console and JSON output carry the same
fields (``stage``, ``doc_id``, ``error_code``) regardless of which stage
produced them.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

__all__ = [
    "JSONFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "log_event",
]

ROOT_LOGGER_NAME = "EvolutionMetadata"


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string with extraction-specific fields."""

        now = datetime.now(timezone.utc)
        payload = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            payload.update(record.extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that enriches structured logs with shared context."""

    def __init__(
        self, logger: logging.Logger, base_fields: Optional[Dict[str, Any]] = None
    ) -> None:
        """Store underlying logger and initial structured ``base_fields``."""

        super().__init__(logger, {})
        self.base_fields: Dict[str, Any] = dict(base_fields or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple[str, Dict[str, Any]]:
        """Merge adapter context into ``extra`` metadata for structured output."""

        extra = kwargs.setdefault("extra", {})
        fields = dict(self.base_fields)
        extra_fields = extra.get("extra_fields")
        if isinstance(extra_fields, dict):
            fields.update(extra_fields)
        extra["extra_fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **fields: object) -> "StructuredLogger":
        """Attach additional persistent fields to the adapter and return ``self``."""

        filtered = {k: v for k, v in fields.items() if v is not None}
        self.base_fields.update(filtered)
        return self


def configure_logging(level: str = "INFO", fmt: str = "console") -> logging.Logger:
    """Install a single stream handler on the package root logger.

    ``fmt`` selects ``"console"`` (``LEVEL: message``) or ``"json"`` output.
    Calling it again replaces the handler it installed previously.
    """

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_evometa_managed", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    if str(fmt).lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler._evometa_managed = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.propagate = False
    return root


def get_logger(
    name: str, level: Optional[str] = None, *, base_fields: Optional[Dict[str, Any]] = None
) -> StructuredLogger:
    """Return the structured adapter for ``name``, creating it on first use."""

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    adapter = getattr(logger, "_evometa_adapter", None)
    if not isinstance(adapter, StructuredLogger):
        adapter = StructuredLogger(logger, base_fields)
        setattr(logger, "_evometa_adapter", adapter)
    elif base_fields:
        adapter.bind(**base_fields)
    return adapter


def log_event(logger: logging.LoggerAdapter | logging.Logger, level: str, message: str, **fields: object) -> None:
    """Emit a structured log record using the ``extra_fields`` convention."""

    normalised_level = str(level).lower()
    base_stage = getattr(logger, "base_fields", {}).get("stage")
    if "stage" not in fields and base_stage is not None:
        fields["stage"] = base_stage
    if normalised_level in {"warning", "error"}:
        fields.setdefault("stage", "unknown")
        fields.setdefault("doc_id", "unknown")
        error_code = fields.get("error_code")
        fields["error_code"] = str(error_code).upper() if error_code else "UNKNOWN"

    emitter = getattr(logger, normalised_level, None)
    if not callable(emitter):
        raise AttributeError(f"Logger has no level '{level}'")
    emitter(message, extra={"extra_fields": fields})
