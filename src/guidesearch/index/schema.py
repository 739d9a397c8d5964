"""Full-text configuration shared by the index builder and the query engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class SearchSchema:
    """Which fields are indexed, which are stored, and how queries are scored.

    An artifact must be loaded with the schema it was built with; scores are
    meaningless otherwise.
    """

    fields: Tuple[str, ...]
    store_fields: Tuple[str, ...]
    boost: Dict[str, float] = field(default_factory=dict)
    fuzzy: float = 0.0
    prefix: bool = False
    id_field: str = "id"

    def field_boost(self, name: str) -> float:
        return self.boost.get(name, 1.0)


GUIDE_SCHEMA = SearchSchema(
    fields=("title", "content", "category", "headings", "summary"),
    store_fields=("title", "slug", "category", "categorySlug", "summary", "order", "publishedAt"),
    boost={"title": 3.0, "headings": 2.0, "category": 1.5},
    fuzzy=0.2,
    prefix=True,
)
