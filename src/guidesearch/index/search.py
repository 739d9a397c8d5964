"""Guide search query engine."""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from guidesearch.index.schema import GUIDE_SCHEMA, SearchSchema
from guidesearch.index.storage import IndexCache
from guidesearch.models import DocumentRecord

LOGGER = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
SNIPPET_LEAD = 50
ELLIPSIS = "..."


@dataclass(slots=True)
class SearchResult:
    id: str
    title: str
    slug: str
    category: str
    category_slug: str
    summary: str
    order: int
    published_at: str
    content_preview: str
    score: float
    snippet: str
    highlighted_title: str
    match: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "category": self.category,
            "categorySlug": self.category_slug,
            "summary": self.summary,
            "order": self.order,
            "publishedAt": self.published_at,
            "contentPreview": self.content_preview,
            "score": self.score,
            "match": self.match,
            "snippet": self.snippet,
            "highlightedTitle": self.highlighted_title,
        }


def is_searchable(query: Optional[str]) -> bool:
    return query is not None and len(query.strip()) >= MIN_QUERY_LENGTH


def extract_snippet(text: str, query: str, max_length: int = 150) -> str:
    """Cut an excerpt of ``text`` around the longest query word it contains.

    Among equally long words the one listed first in the query wins, even if
    a later word occurs earlier in the text.
    """
    lower_text = text.lower()
    best_position = -1
    best_length = 0
    for word in query.lower().split():
        position = lower_text.find(word)
        if position != -1 and len(word) > best_length:
            best_length = len(word)
            best_position = position

    if best_position == -1:
        return text[:max_length] + (ELLIPSIS if len(text) > max_length else "")

    start = max(0, best_position - SNIPPET_LEAD)
    end = min(len(text), best_position + max_length)
    snippet = text[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


def highlight_text(text: str, query: str) -> str:
    """Wrap every case-insensitive occurrence of each query word in ``<mark>``.

    The result is HTML: the text around and inside the markers is escaped.
    """
    words = sorted({word for word in query.split() if word}, key=len, reverse=True)
    if not words:
        return html.escape(text, quote=False)
    pattern = re.compile("|".join(re.escape(word) for word in words), re.IGNORECASE)

    parts = []
    position = 0
    for match in pattern.finditer(text):
        parts.append(html.escape(text[position : match.start()], quote=False))
        parts.append(f"<mark>{html.escape(match.group(0), quote=False)}</mark>")
        position = match.end()
    parts.append(html.escape(text[position:], quote=False))
    return "".join(parts)


class Searcher:
    """Ranked guide search over the cached index."""

    def __init__(
        self,
        cache: IndexCache,
        *,
        schema: SearchSchema = GUIDE_SCHEMA,
        snippet_chars: int = 150,
    ) -> None:
        self.cache = cache
        self.schema = schema
        self.snippet_chars = snippet_chars

    def search(self, query: str, *, category: Optional[str] = None, limit: int = 10) -> List[SearchResult]:
        if not is_searchable(query) or limit < 1:
            return []
        query = query.strip()

        loaded = self.cache.get_or_load()
        hits = loaded.index.search(
            query,
            boost=self.schema.boost,
            fuzzy=self.schema.fuzzy,
            prefix=self.schema.prefix,
        )

        results: List[SearchResult] = []
        for hit in hits:
            record = loaded.get(hit.id)
            if record is None:
                LOGGER.warning("Search hit %s has no stored document", hit.id)
                continue
            if category and record.category_slug != category:
                continue
            results.append(self._enrich(record, hit.score, hit.match, query))
            if len(results) >= limit:
                break
        return results

    def _enrich(
        self, record: DocumentRecord, score: float, match: Dict[str, List[str]], query: str
    ) -> SearchResult:
        return SearchResult(
            id=record.id,
            title=record.title,
            slug=record.slug,
            category=record.category,
            category_slug=record.category_slug,
            summary=record.summary,
            order=record.order,
            published_at=record.published_at,
            content_preview=record.content_preview,
            score=score,
            match=match,
            snippet=extract_snippet(record.content_preview or record.summary or "", query, self.snippet_chars),
            highlighted_title=highlight_text(record.title, query),
        )
