"""Structural parsing of proposal markdown into a title and header fields.

Proposal documents open with a level-one heading followed by a bullet list of
``Label: value`` items::

    # Keywords as argument labels

    * Proposal: [SE-0001](0001-keywords-as-argument-labels.md)
    * Authors: [Doug Gregor](https://github.com/DougGregor)
    * Status: **Implemented (Swift 2.2)**

This module locates that block and exposes it as :class:`HeaderFields`, an
explicit mapping from label to :class:`HeaderField`. Only the inline
constructs the field extractors consume are recognised: links, strong
emphasis, and code spans. Anything richer is left in ``HeaderField.text``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Optional, Protocol

__all__ = [
    "HeaderField",
    "HeaderFields",
    "ProposalDocument",
    "StructureParser",
    "parse_proposal",
]

_HEADING_RE = re.compile(r"^#\s+(?P<title>.*?)(?:\s+#+)?\s*$")
_BULLET_RE = re.compile(r"^[*+-]\s+(?P<body>.*)$")
_LABEL_RE = re.compile(r"^(?P<label>[^:]+?)\s*:\s*(?P<value>.*)$")
_LINK_RE = re.compile(r"\[(?P<text>[^\]]*)\]\((?P<url>[^)\s]*)(?:\s+\"[^\"]*\")?\)")
_STRONG_RE = re.compile(r"\*\*(?P<star>.+?)\*\*|__(?P<under>.+?)__")
_CODE_RE = re.compile(r"`(?P<code>[^`]+)`")
_EMPHASIS_CHARS = re.compile(r"[*_`]")


@dataclass(frozen=True, slots=True)
class HeaderField:
    """Structural content of one ``Label: value`` header item."""

    label: str
    text: str
    links: tuple[tuple[str, str], ...] = ()
    strong: tuple[str, ...] = ()
    code: tuple[str, ...] = ()

    @property
    def plain_text(self) -> str:
        """Value with links collapsed to their text and emphasis markers removed."""

        collapsed = _LINK_RE.sub(lambda m: m.group("text"), self.text)
        return _EMPHASIS_CHARS.sub("", collapsed).strip()


class HeaderFields(Mapping[str, HeaderField]):
    """Label → field mapping whose lookups return ``None`` on a miss."""

    def __init__(self, items: Iterable[HeaderField] = ()) -> None:
        self._fields: dict[str, HeaderField] = {}
        for item in items:
            # First occurrence wins when a label is repeated.
            self._fields.setdefault(item.label, item)

    def __getitem__(self, label: str) -> HeaderField:
        return self._fields[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def first_of(self, labels: Iterable[str]) -> Optional[HeaderField]:
        """Return the field for the first label variant present, if any."""

        for label in labels:
            found = self._fields.get(label)
            if found is not None:
                return found
        return None


@dataclass(frozen=True, slots=True)
class ProposalDocument:
    """Parsed structure of a proposal: its heading and header block."""

    title: Optional[str]
    fields: Optional[HeaderFields] = None
    body: str = field(default="", repr=False)


class StructureParser(Protocol):
    """Turns raw document text into a :class:`ProposalDocument`."""

    def __call__(self, text: str) -> ProposalDocument: ...


def _parse_field(body: str) -> Optional[HeaderField]:
    match = _LABEL_RE.match(body.strip())
    if match is None:
        return None
    value = match.group("value").strip()
    return HeaderField(
        label=match.group("label").strip(),
        text=value,
        links=tuple((m.group("text").strip(), m.group("url")) for m in _LINK_RE.finditer(value)),
        strong=tuple(
            (m.group("star") or m.group("under")).strip() for m in _STRONG_RE.finditer(value)
        ),
        code=tuple(m.group("code") for m in _CODE_RE.finditer(value)),
    )


def _header_items(lines: list[str], start: int) -> Optional[list[str]]:
    """Collect the bullet items of the first list after ``start``."""

    items: list[str] = []
    index = start
    while index < len(lines) and not lines[index].strip():
        index += 1
    while index < len(lines):
        line = lines[index]
        bullet = _BULLET_RE.match(line)
        if bullet is not None:
            items.append(bullet.group("body"))
        elif items and line.startswith((" ", "\t")) and line.strip():
            items[-1] = f"{items[-1]} {line.strip()}"
        else:
            break
        index += 1
    return items or None


def parse_proposal(text: str) -> ProposalDocument:
    """Locate the title heading and header field block of ``text``."""

    lines = text.splitlines()
    for index, line in enumerate(lines):
        heading = _HEADING_RE.match(line)
        if heading is None:
            continue
        title = heading.group("title") or None
        items = _header_items(lines, index + 1)
        if items is None:
            return ProposalDocument(title=title, fields=None, body=text)
        parsed = (_parse_field(item) for item in items)
        return ProposalDocument(
            title=title,
            fields=HeaderFields(item for item in parsed if item is not None),
            body=text,
        )
    return ProposalDocument(title=None, fields=None, body=text)
