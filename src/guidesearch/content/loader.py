"""Guide file loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from guidesearch.content.frontmatter import FrontmatterError, parse_frontmatter
from guidesearch.models import ContentDocument
from guidesearch.utils.files import iter_content_paths

LOGGER = logging.getLogger(__name__)


def load_document(path: Path) -> ContentDocument:
    """Read a single guide file.

    The slug comes from the frontmatter when present, otherwise from the
    file name.
    """
    text = path.read_text(encoding="utf-8")
    try:
        metadata, body = parse_frontmatter(text)
    except FrontmatterError as exc:
        raise FrontmatterError(f"{path.name}: {exc}") from exc

    return ContentDocument(
        slug=metadata.slug or path.stem,
        title=metadata.title,
        body=body,
        category=metadata.category,
        category_slug=metadata.category_slug,
        summary=metadata.summary,
        order=metadata.order,
        published_at=metadata.published_at,
        path=path,
    )


def list_documents(source_dir: Path) -> List[ContentDocument]:
    """Load every guide in ``source_dir``; one bad file fails the whole call."""
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Content directory not found: {source_dir}")

    documents = []
    for path in iter_content_paths(source_dir):
        LOGGER.debug("Loading %s", path)
        documents.append(load_document(path))
    return documents
