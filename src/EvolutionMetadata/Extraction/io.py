"""File helpers for snapshot inputs and extraction outputs."""

from __future__ import annotations

import contextlib
import hashlib
import json
import os
import shutil
import uuid
from pathlib import Path
from typing import Any, Iterator, Optional, TextIO

__all__ = [
    "atomic_write",
    "dump_json",
    "git_blob_sha",
    "load_json",
    "move_directory",
    "write_json",
    "write_text",
]


@contextlib.contextmanager
def atomic_write(path: Path) -> Iterator[TextIO]:
    """Write to a temporary file and atomically replace the destination."""

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp.{uuid.uuid4().hex}")
    try:
        with tmp.open("w", encoding="utf-8") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def dump_json(payload: Any) -> str:
    """Pretty-print ``payload`` with sorted keys and a trailing newline."""

    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def write_text(path: Path, text: str) -> None:
    with atomic_write(path) as handle:
        handle.write(text)


def write_json(path: Path, payload: Any) -> None:
    write_text(path, dump_json(payload))


def load_json(path: Path) -> Optional[Any]:
    """Decode ``path``; a missing file yields ``None``.

    Decoding errors propagate so callers can tell "absent" from "corrupt".
    """

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def git_blob_sha(path: Path) -> str:
    """Hash file contents the way git hashes blobs, so local and listed hashes agree."""

    data = path.read_bytes()
    digest = hashlib.sha1(f"blob {len(data)}\0".encode("ascii"))
    digest.update(data)
    return digest.hexdigest()


def move_directory(source: Path, destination: Path) -> None:
    """Move ``source`` to ``destination``, replacing any existing directory."""

    if destination.exists():
        shutil.rmtree(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(destination))
