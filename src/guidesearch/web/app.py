"""FastAPI application serving guide search."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guidesearch import __version__
from guidesearch.config import AppConfig
from guidesearch.index.search import Searcher, is_searchable
from guidesearch.index.storage import IndexCache
from guidesearch.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = "Search service unavailable"

app = FastAPI(title="Guide Search", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.include_router(frontend_router)


def _resolve_index_path(index: Path | None) -> Path:
    config = AppConfig(index_path=index) if index is not None else AppConfig()
    return config.resolve_index_path(Path.cwd())


def configure_index(index: Path | None = None) -> IndexCache:
    """Point the app at an artifact; the file is read on the first search."""
    cache = IndexCache(_resolve_index_path(index))
    app.state.index_cache = cache
    return cache


configure_index()


def get_index_cache(request: Request) -> IndexCache:
    return request.app.state.index_cache


def get_searcher(cache: IndexCache = Depends(get_index_cache)) -> Searcher:
    return Searcher(cache, snippet_chars=AppConfig().snippet_chars)


def _parse_limit(raw: str | None) -> int:
    """Read the ``limit`` parameter; anything that is not an integer means the default."""
    config = AppConfig()
    try:
        limit = int(raw) if raw is not None else config.default_limit
    except ValueError:
        limit = config.default_limit
    return config.clamp_limit(limit)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/search")
async def search_guides(
    q: str | None = None,
    category: str | None = None,
    limit: str | None = None,
    searcher: Searcher = Depends(get_searcher),
) -> Any:
    if q is None or not is_searchable(q):
        return {"results": [], "total": 0, "query": q or ""}

    try:
        results = await asyncio.to_thread(
            searcher.search,
            q,
            category=category or None,
            limit=_parse_limit(limit),
        )
    except Exception:
        LOGGER.exception("Search error for query %r", q)
        return JSONResponse(status_code=500, content={"error": SERVICE_UNAVAILABLE})

    payload: Dict[str, Any] = {
        "results": [result.to_dict() for result in results],
        "total": len(results),
        "query": q,
    }
    return payload
