"""Offline guide indexing pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from guidesearch.content.frontmatter import FrontmatterError
from guidesearch.content.loader import list_documents
from guidesearch.index.fulltext import FullTextIndex
from guidesearch.index.schema import GUIDE_SCHEMA, SearchSchema
from guidesearch.index.storage import write_artifact
from guidesearch.models import ContentDocument, DocumentRecord
from guidesearch.utils import text

LOGGER = logging.getLogger(__name__)


class IndexBuildError(RuntimeError):
    """The index could not be built; no artifact was written."""


@dataclass(slots=True)
class BuildStats:
    output: Path
    documents: int = 0
    categories: set[str] = field(default_factory=set)


class IndexBuilder:
    """Turns a directory of guides into a search index artifact."""

    def __init__(
        self,
        schema: SearchSchema = GUIDE_SCHEMA,
        *,
        word_limit: int = 500,
        preview_chars: int = 300,
    ) -> None:
        self.schema = schema
        self.word_limit = word_limit
        self.preview_chars = preview_chars

    def prepare(self, document: ContentDocument) -> Tuple[Dict[str, Any], DocumentRecord]:
        """Build the indexed fields and the stored record for one guide."""
        content = text.truncate_words(text.clean(document.body), self.word_limit)
        fields = {
            "id": document.slug,
            "title": document.title,
            "slug": document.slug,
            "category": document.category,
            "categorySlug": document.category_slug,
            "summary": document.summary,
            "content": content,
            "headings": " ".join(text.headings(document.body)),
            "order": document.order,
            "publishedAt": document.published_at,
        }
        record = DocumentRecord(
            id=document.slug,
            title=document.title,
            slug=document.slug,
            category=document.category,
            category_slug=document.category_slug,
            summary=document.summary,
            order=document.order,
            published_at=document.published_at,
            content_preview=content[: self.preview_chars],
        )
        return fields, record

    def build_index(self, documents: Sequence[ContentDocument]) -> Tuple[FullTextIndex, List[DocumentRecord]]:
        index = FullTextIndex(self.schema)
        records = []
        for document in documents:
            fields, record = self.prepare(document)
            index.add(fields)
            records.append(record)
        return index, records

    def build(self, source_dir: Path, output_path: Path) -> BuildStats:
        """Index every guide in ``source_dir`` and write the artifact.

        Any unreadable or malformed guide aborts the build before anything
        is written.
        """
        try:
            documents = list_documents(source_dir)
            index, records = self.build_index(documents)
        except FrontmatterError as exc:
            raise IndexBuildError(f"Invalid guide: {exc}") from exc
        except FileNotFoundError as exc:
            raise IndexBuildError(str(exc)) from exc
        except (OSError, ValueError) as exc:
            raise IndexBuildError(f"Unable to index {source_dir}: {exc}") from exc

        try:
            write_artifact(output_path, index, records)
        except OSError as exc:
            raise IndexBuildError(f"Unable to write {output_path}: {exc}") from exc

        LOGGER.info("Indexed %d guide articles into %s", len(records), output_path)
        return BuildStats(
            output=output_path,
            documents=len(records),
            categories={record.category_slug for record in records if record.category_slug},
        )
