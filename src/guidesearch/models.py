"""Core guidesearch data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

DEFAULT_ORDER = 999


@dataclass(slots=True)
class ContentDocument:
    """A parsed guide article before indexing."""

    slug: str
    title: str
    body: str
    category: str = ""
    category_slug: str = ""
    summary: str = ""
    order: int = DEFAULT_ORDER
    published_at: str = ""
    path: Path | None = None


@dataclass(slots=True)
class GuideCategory:
    name: str
    slug: str
    order: int


@dataclass(slots=True)
class DocumentRecord:
    """Display fields stored next to the index for each guide."""

    id: str
    title: str
    slug: str
    category: str
    category_slug: str
    summary: str
    order: int
    published_at: str
    content_preview: str

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
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentRecord":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            slug=data.get("slug", data["id"]),
            category=data.get("category", ""),
            category_slug=data.get("categorySlug", ""),
            summary=data.get("summary", ""),
            order=int(data.get("order", DEFAULT_ORDER)),
            published_at=data.get("publishedAt", ""),
            content_preview=data.get("contentPreview", ""),
        )
