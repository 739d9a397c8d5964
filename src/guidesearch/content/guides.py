"""Guide lookups and category grouping used by the listing pages."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from guidesearch.models import DEFAULT_ORDER, ContentDocument, GuideCategory

RESOURCES_SLUG = "resources"


@dataclass(slots=True)
class CategoryGroup:
    category: GuideCategory
    guides: List[ContentDocument] = field(default_factory=list)


def sort_guides(guides: Iterable[ContentDocument]) -> List[ContentDocument]:
    """Order guides by explicit order, falling back to title."""
    return sorted(guides, key=lambda guide: (guide.order, guide.title.lower()))


def get_guide_by_slug(guides: Iterable[ContentDocument], slug: str) -> Optional[ContentDocument]:
    return next((guide for guide in guides if guide.slug == slug), None)


def get_guides_by_category(guides: Iterable[ContentDocument], category_slug: str) -> List[ContentDocument]:
    return [guide for guide in sort_guides(guides) if guide.category_slug == category_slug]


def load_categories(path: Path) -> Dict[str, GuideCategory]:
    """Read the category table; a missing file means no categories."""
    if not path.exists():
        return {}
    raw = json.loads(path.read_text(encoding="utf-8"))
    return {
        key: GuideCategory(
            name=value["name"],
            slug=value["slug"],
            order=int(value.get("order", DEFAULT_ORDER)),
        )
        for key, value in raw.items()
    }


def group_by_category(
    guides: Iterable[ContentDocument], categories: Dict[str, GuideCategory]
) -> List[CategoryGroup]:
    """Group guides under their category, dropping empty categories.

    The ``resources`` page is not part of any category listing.
    """
    grouped = {category.slug: CategoryGroup(category) for category in categories.values()}
    for guide in sort_guides(guides):
        if guide.slug == RESOURCES_SLUG:
            continue
        group = grouped.get(guide.category_slug)
        if group is not None:
            group.guides.append(guide)

    return sorted(
        (group for group in grouped.values() if group.guides),
        key=lambda group: group.category.order,
    )
