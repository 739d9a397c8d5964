"""Shared fixtures: a small guide corpus on disk and its built index."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from guidesearch.index.builder import IndexBuilder

COLOR_THEORY = """---
title: Color Theory
category: Design
categorySlug: design
summary: Choosing palettes that read well on printed maps.
order: 1
publishedAt: 2024-03-01
---

# Hue and value

Sequential palettes work for ordered data. Diverging palettes highlight a midpoint.

## Contrast

Keep enough contrast between land and water.
"""

MAP_PROJECTIONS = """---
title: Map Projections
category: Fundamentals
categorySlug: fundamentals
summary: How the globe is flattened.
order: 2
publishedAt: 2024-01-15
---

import Figure from '../components/figure'

# Why projections matter

Every flat representation distorts area, shape, distance or direction.

<Figure src="mercator.png" />

## Conformal projections

Mercator preserves angles but inflates areas near the poles.
"""

TYPOGRAPHY_BASICS = """---
title: Typography Basics
category: Design
categorySlug: design
summary: Label placement and type hierarchy.
order: 3
---

# Labels

Place labels so they never collide. A good map uses at most two typefaces.

```js
const label = { font: "serif" };
```
"""


@pytest.fixture
def write_guide(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a guide file into ``tmp_path/guides``."""
    guides_dir = tmp_path / "guides"
    guides_dir.mkdir(exist_ok=True)

    def _write(name: str, text: str) -> Path:
        path = guides_dir / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def guide_dir(write_guide: Callable[[str, str], Path], tmp_path: Path) -> Path:
    write_guide("color-theory.mdx", COLOR_THEORY)
    write_guide("map-projections.mdx", MAP_PROJECTIONS)
    write_guide("typography-basics.mdx", TYPOGRAPHY_BASICS)
    return tmp_path / "guides"


@pytest.fixture
def index_path(guide_dir: Path, tmp_path: Path) -> Path:
    output = tmp_path / "public" / "search" / "guide-index.json"
    IndexBuilder().build(guide_dir, output)
    return output
