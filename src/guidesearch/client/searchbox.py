"""Search-as-you-type box driving the ``/search`` endpoint.

The box is independent of any UI toolkit: a view feeds it input, key and
click events and renders ``results``, ``selected_index`` and ``is_open``.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

LOGGER = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3
MIN_QUERY_LENGTH = 2

Result = Dict[str, Any]


class SearchState(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    LOADING = "loading"
    SHOWING_RESULTS = "showing_results"
    SHOWING_EMPTY = "showing_empty"


class SearchFetchError(RuntimeError):
    """The search request failed or returned something unreadable."""


class HttpSearchFetcher:
    """Calls ``GET /search`` and returns the ``results`` list."""

    def __init__(
        self,
        base_url: str = "",
        *,
        limit: int = 10,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ) -> None:
        self.limit = limit
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def __call__(self, query: str) -> List[Result]:
        try:
            response = self._client.get("/search", params={"q": query, "limit": str(self.limit)})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SearchFetchError(str(exc)) from exc

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise SearchFetchError("Unexpected search response")
        return results

    def close(self) -> None:
        self._client.close()


class SearchBox:
    """Debounced query input with a keyboard-navigable result panel."""

    def __init__(
        self,
        fetch: Callable[[str], List[Result]],
        *,
        navigate: Callable[[str], None],
        blur: Optional[Callable[[], None]] = None,
        delay: float = DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        self._fetch = fetch
        self._navigate = navigate
        self._blur = blur
        self.delay = delay
        self._timer_factory = timer_factory

        self.query = ""
        self.results: List[Result] = []
        self.is_open = False
        self.is_loading = False
        self.selected_index = 0
        self.state = SearchState.IDLE

        self._timer: Any = None
        # Bumped on every input; work started for an older value is dropped.
        self._generation = 0
        self._lock = threading.RLock()

    def set_query(self, text: str) -> None:
        """Record typed text and restart the debounce timer."""
        with self._lock:
            self.query = text
            self._cancel_timer()
            self._generation += 1
            self._timer = self._timer_factory(self.delay, self._on_timer, args=(text, self._generation))
            self._timer.start()
            self.state = SearchState.DEBOUNCING

    def _on_timer(self, text: str, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._search(text, generation)

    def perform_search(self, query: str) -> None:
        with self._lock:
            generation = self._generation
        self._search(query, generation)

    def _search(self, query: str, generation: int) -> None:
        with self._lock:
            if len(query.strip()) < MIN_QUERY_LENGTH:
                self.results = []
                self.is_open = False
                self.is_loading = False
                self.state = SearchState.IDLE
                return
            self.is_loading = True
            self.state = SearchState.LOADING

        try:
            results: Optional[List[Result]] = list(self._fetch(query.strip()))
        except SearchFetchError as exc:
            LOGGER.error("Search error: %s", exc)
            results = None

        with self._lock:
            if generation != self._generation:
                return
            self.is_loading = False
            if results is None:
                self.results = []
                self.is_open = False
                self.state = SearchState.IDLE
                return
            self.results = results
            self.is_open = bool(results)
            self.selected_index = 0
            self.state = SearchState.SHOWING_RESULTS if results else SearchState.SHOWING_EMPTY

    def handle_key(self, key: str) -> bool:
        """Apply a navigation key; True means the default action is suppressed."""
        target = None
        with self._lock:
            if not self.is_open or not self.results:
                return False
            count = len(self.results)
            if key == "ArrowDown":
                self.selected_index = (self.selected_index + 1) % count
            elif key == "ArrowUp":
                self.selected_index = (self.selected_index - 1) % count
            elif key == "Enter":
                target = f"/guide/{self.results[self.selected_index]['slug']}"
            elif key == "Escape":
                self.is_open = False
                self.state = SearchState.IDLE
            else:
                return False

        if target is not None:
            self._navigate(target)
        elif key == "Escape" and self._blur is not None:
            self._blur()
        return True

    def click(self, *, inside: bool) -> None:
        """A click outside the box closes the panel but keeps the query."""
        if inside:
            return
        with self._lock:
            self.is_open = False
            if self.state in (SearchState.SHOWING_RESULTS, SearchState.SHOWING_EMPTY):
                self.state = SearchState.IDLE

    def focus(self) -> None:
        with self._lock:
            if self.results:
                self.is_open = True
                self.state = SearchState.SHOWING_RESULTS

    def clear(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self.query = ""
            self.results = []
            self.is_open = False
            self.is_loading = False
            self.state = SearchState.IDLE

    def close(self) -> None:
        with self._lock:
            self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
