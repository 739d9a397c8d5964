"""Strict YAML frontmatter parsing for guide articles.

A guide file starts with a ``---`` delimited YAML block followed by the MDX
body. The block is validated against :class:`GuideMetadata`; anything that
does not fit is rejected instead of guessed at.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from guidesearch.models import DEFAULT_ORDER

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*$\r?\n?", re.MULTILINE | re.DOTALL)


class FrontmatterError(ValueError):
    """Raised when a guide file has no usable frontmatter."""


class GuideMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=1)
    slug: str = ""
    category: str = ""
    category_slug: str = Field("", alias="categorySlug")
    summary: str = ""
    order: int = DEFAULT_ORDER
    published_at: str = Field("", alias="publishedAt")

    @field_validator("slug", "category", "category_slug", "summary", mode="before")
    @classmethod
    def _empty_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("order", mode="before")
    @classmethod
    def _default_order(cls, value: Any) -> Any:
        return DEFAULT_ORDER if value is None else value

    @field_validator("published_at", mode="before")
    @classmethod
    def _iso_date(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value


def parse_frontmatter(text: str) -> Tuple[GuideMetadata, str]:
    """Split ``text`` into validated metadata and the remaining body."""
    text = text.lstrip("\ufeff")
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        raise FrontmatterError("No frontmatter found")

    try:
        raw = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid frontmatter: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise FrontmatterError("Frontmatter must be a mapping")

    try:
        metadata = GuideMetadata.model_validate(raw)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise FrontmatterError(f"Invalid frontmatter fields: {fields}") from exc

    body = text[match.end():].strip()
    return metadata, body
