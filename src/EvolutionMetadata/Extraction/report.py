"""Plain-text validation report for records that carry issues.

Example section::

    SE-0001 'Allow (most) keywords as argument labels'
    0001-keywords-as-argument-labels.md

    \tERRORS
    \tMissing author(s). (Code 4)

Sections are separated by a blank line; records without issues are omitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import Issue, Record

__all__ = ["record_report", "validation_report"]


def _issues_block(heading: str, found: Sequence[Issue]) -> str:
    lines = [f"\t{heading}"]
    lines.extend(f"\t{issue.message} (Code {issue.code})" for issue in found)
    return "\n".join(lines)


def _heading(record: Record) -> str:
    if not record.id and not record.title:
        return "Missing ID & Title"
    doc_id = record.id or "Missing ID"
    title = f"'{record.title}'" if record.title else "Missing Title"
    return f"{doc_id} {title}"


def record_report(record: Record) -> str:
    """Report section for one record, or ``""`` when it has no issues."""

    if not (record.has_errors or record.has_warnings):
        return ""
    parts = [f"{_heading(record)}\n{record.link}"]
    if record.has_errors:
        parts.append(_issues_block("ERRORS", record.errors))
    if record.has_warnings:
        parts.append(_issues_block("WARNINGS", record.warnings))
    return "\n\n".join(parts)


def validation_report(records: Iterable[Record]) -> str:
    """Concatenate the sections of every record with at least one issue."""

    sections = [section for section in map(record_report, records) if section]
    if not sections:
        return ""
    return "\n\n".join(sections) + "\n"
