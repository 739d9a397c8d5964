"""Search index artifact persistence and the per-process index cache."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from guidesearch.index.fulltext import FullTextIndex
from guidesearch.index.schema import GUIDE_SCHEMA, SearchSchema
from guidesearch.models import DocumentRecord
from guidesearch.utils.files import write_json_atomic

LOGGER = logging.getLogger(__name__)


class IndexUnavailableError(RuntimeError):
    """The search index artifact could not be loaded."""


@dataclass(slots=True)
class LoadedIndex:
    index: FullTextIndex
    documents: Dict[str, DocumentRecord]

    def get(self, doc_id: str) -> Optional[DocumentRecord]:
        return self.documents.get(doc_id)


def build_artifact(index: FullTextIndex, records: List[DocumentRecord]) -> Dict[str, Any]:
    return {
        "index": index.to_dict(),
        "documents": [record.to_dict() for record in records],
    }


def write_artifact(path: Path, index: FullTextIndex, records: List[DocumentRecord]) -> None:
    write_json_atomic(path, build_artifact(index, records))


def read_artifact(path: Path, schema: SearchSchema = GUIDE_SCHEMA) -> LoadedIndex:
    """Load an artifact written by :func:`write_artifact`."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        index = FullTextIndex.from_dict(data["index"], schema)
        records = [DocumentRecord.from_dict(item) for item in data["documents"]]
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
        LOGGER.error("Error loading search index %s: %s", path, exc)
        raise IndexUnavailableError("Search index not available") from exc

    return LoadedIndex(index=index, documents={record.id: record for record in records})


class IndexCache:
    """Loads the artifact once and hands out the same :class:`LoadedIndex`.

    Concurrent first callers wait on the lock and reuse the winner's result.
    A failed load is not remembered; the next call tries again.
    """

    def __init__(self, path: Path, schema: SearchSchema = GUIDE_SCHEMA) -> None:
        self.path = Path(path)
        self.schema = schema
        self._loaded: Optional[LoadedIndex] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded is not None

    def get_or_load(self) -> LoadedIndex:
        loaded = self._loaded
        if loaded is not None:
            return loaded
        with self._lock:
            if self._loaded is None:
                LOGGER.info("Loading search index from %s", self.path)
                self._loaded = read_artifact(self.path, self.schema)
            return self._loaded

    def clear(self) -> None:
        with self._lock:
            self._loaded = None
