"""Utility helpers for working with files."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator

CONTENT_SUFFIX = ".mdx"


def iter_content_paths(source_dir: Path) -> Iterator[Path]:
    """Yield guide files directly inside ``source_dir`` in name order."""
    for child in sorted(source_dir.iterdir()):
        if child.is_file() and child.suffix.lower() == CONTENT_SUFFIX:
            yield child


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write JSON next to ``path`` and rename it into place.

    Readers either see the previous file or the complete new one.
    """
    ensure_parent(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, separators=(",", ":"))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
