"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def _resolve(path: Path, base_dir: Path | None) -> Path:
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path


@dataclass(slots=True)
class AppConfig:
    content_dir: Path = Path("content/guide")
    index_path: Path = Path("public/search/guide-index.json")
    categories_path: Path = Path("data/guide-categories.json")
    word_limit: int = 500
    preview_chars: int = 300
    snippet_chars: int = 150
    default_limit: int = 10
    max_limit: int = 50

    def __post_init__(self) -> None:
        self.content_dir = Path(self.content_dir)
        self.index_path = Path(self.index_path)
        self.categories_path = Path(self.categories_path)

    def resolve_content_dir(self, base_dir: Path | None = None) -> Path:
        return _resolve(self.content_dir, base_dir)

    def resolve_index_path(self, base_dir: Path | None = None) -> Path:
        return _resolve(self.index_path, base_dir)

    def resolve_categories_path(self, base_dir: Path | None = None) -> Path:
        return _resolve(self.categories_path, base_dir)

    def clamp_limit(self, limit: int) -> int:
        return min(limit, self.max_limit)
