"""Tests for the search-as-you-type client."""

from __future__ import annotations

from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from guidesearch.client import HttpSearchFetcher, SearchBox, SearchFetchError, SearchState
from guidesearch.index.storage import IndexCache
from guidesearch.web.app import app

RESULTS = [
    {"id": "map-projections", "slug": "map-projections", "title": "Map Projections"},
    {"id": "color-theory", "slug": "color-theory", "title": "Color Theory"},
    {"id": "typography-basics", "slug": "typography-basics", "title": "Typography Basics"},
]


class FakeTimer:
    """Timer stand-in that only fires when told to."""

    def __init__(self, delay, function, args=()) -> None:
        self.delay = delay
        self.function = function
        self.args = args
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.function(*self.args)


class TimerFactory:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay, function, args=()) -> FakeTimer:
        timer = FakeTimer(delay, function, args)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


@pytest.fixture
def timers() -> TimerFactory:
    return TimerFactory()


@pytest.fixture
def fetch() -> MagicMock:
    return MagicMock(return_value=list(RESULTS))


@pytest.fixture
def navigate() -> MagicMock:
    return MagicMock()


@pytest.fixture
def blur() -> MagicMock:
    return MagicMock()


@pytest.fixture
def box(fetch, navigate, blur, timers) -> SearchBox:
    return SearchBox(fetch, navigate=navigate, blur=blur, timer_factory=timers)


def type_and_wait(box: SearchBox, timers: TimerFactory, text: str) -> None:
    box.set_query(text)
    timers.last.fire()


class TestDebounce:
    """Input is debounced before searching."""

    def test_only_final_value_is_fetched(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        for text in ("m", "ma", "map"):
            box.set_query(text)

        assert box.state is SearchState.DEBOUNCING
        assert [timer.cancelled for timer in timers.timers] == [True, True, False]
        assert timers.last.delay == 0.3

        for timer in timers.timers:
            timer.fire()

        fetch.assert_called_once_with("map")

    def test_superseded_timer_does_nothing(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        box.set_query("map")
        first = timers.last
        box.set_query("maps")

        # a timer that slipped past cancel still must not search
        first.function(*first.args)

        fetch.assert_not_called()

    def test_short_query_does_not_fetch(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, " m ")

        fetch.assert_not_called()
        assert box.results == []
        assert not box.is_open
        assert not box.is_loading
        assert box.state is SearchState.IDLE

    def test_query_is_trimmed(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "  map  ")

        fetch.assert_called_once_with("map")
        assert box.query == "  map  "


class TestResults:
    """Responses update the panel."""

    def test_results_open_panel(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        assert box.results == RESULTS
        assert box.is_open
        assert not box.is_loading
        assert box.selected_index == 0
        assert box.state is SearchState.SHOWING_RESULTS

    def test_new_results_reset_selection(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")
        box.handle_key("ArrowDown")
        box.handle_key("ArrowDown")

        type_and_wait(box, timers, "maps")

        assert box.selected_index == 0

    def test_empty_results(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        fetch.return_value = []

        type_and_wait(box, timers, "xyzzy")

        assert not box.is_open
        assert box.state is SearchState.SHOWING_EMPTY

    def test_fetch_error_clears_results(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")
        fetch.side_effect = SearchFetchError("boom")

        type_and_wait(box, timers, "maps")

        assert box.results == []
        assert not box.is_open
        assert not box.is_loading
        assert box.state is SearchState.IDLE

    def test_stale_response_is_dropped(self, navigate: MagicMock, timers: TimerFactory) -> None:
        holder = {}

        def fetch(query: str):
            # the user keeps typing while the request is in flight
            holder["box"].set_query("color")
            return list(RESULTS)

        box = SearchBox(fetch, navigate=navigate, timer_factory=timers)
        holder["box"] = box

        type_and_wait(box, timers, "map")

        assert box.results == []
        assert box.query == "color"
        assert box.state is SearchState.DEBOUNCING

    def test_perform_search_skips_debounce(self, box: SearchBox, fetch: MagicMock) -> None:
        box.perform_search("legend")

        fetch.assert_called_once_with("legend")
        assert box.is_open


class TestKeyboard:
    """Keyboard navigation over open results."""

    def test_arrow_down_wraps(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        for _ in range(len(RESULTS)):
            assert box.handle_key("ArrowDown")

        assert box.selected_index == 0

    def test_arrow_up_wraps(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        assert box.handle_key("ArrowUp")
        assert box.selected_index == len(RESULTS) - 1

    def test_enter_navigates(self, box: SearchBox, navigate: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")
        box.handle_key("ArrowDown")

        assert box.handle_key("Enter")
        navigate.assert_called_once_with("/guide/color-theory")

    def test_escape_closes_and_blurs(self, box: SearchBox, blur: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        assert box.handle_key("Escape")
        assert not box.is_open
        assert box.state is SearchState.IDLE
        blur.assert_called_once()

    def test_keys_ignored_when_closed(self, box: SearchBox, navigate: MagicMock) -> None:
        assert not box.handle_key("ArrowDown")
        assert not box.handle_key("Enter")
        assert box.selected_index == 0
        navigate.assert_not_called()

    def test_keys_ignored_without_results(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        fetch.return_value = []
        type_and_wait(box, timers, "xyzzy")

        assert not box.handle_key("ArrowDown")

    def test_other_keys_pass_through(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        assert not box.handle_key("Tab")
        assert box.is_open


class TestPointer:
    """Clicks, focus and the clear button."""

    def test_outside_click_closes_but_keeps_query(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        box.click(inside=False)

        assert not box.is_open
        assert box.query == "map"
        assert box.results == RESULTS
        assert box.state is SearchState.IDLE

    def test_inside_click_keeps_panel(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")

        box.click(inside=True)

        assert box.is_open

    def test_focus_reopens_with_results(self, box: SearchBox, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")
        box.click(inside=False)

        box.focus()

        assert box.is_open
        assert box.state is SearchState.SHOWING_RESULTS

    def test_focus_without_results(self, box: SearchBox) -> None:
        box.focus()

        assert not box.is_open

    def test_clear_resets_everything(self, box: SearchBox, fetch: MagicMock, timers: TimerFactory) -> None:
        type_and_wait(box, timers, "map")
        box.set_query("maps")
        pending = timers.last

        box.clear()
        pending.fire()

        assert pending.cancelled
        assert box.query == ""
        assert box.results == []
        assert not box.is_open
        assert box.state is SearchState.IDLE
        fetch.assert_called_once_with("map")

    def test_close_cancels_timer(self, box: SearchBox, timers: TimerFactory) -> None:
        box.set_query("map")

        box.close()

        assert timers.last.cancelled


class TestHttpSearchFetcher:
    """Fetching results over HTTP."""

    def test_fetches_from_endpoint(self, index_path: Path) -> None:
        previous = app.state.index_cache
        app.state.index_cache = IndexCache(index_path)
        try:
            fetcher = HttpSearchFetcher(client=TestClient(app), limit=2)
            results = fetcher("map")
        finally:
            app.state.index_cache = previous

        assert 0 < len(results) <= 2
        assert results[0]["slug"] == "map-projections"

    def test_sends_query_and_limit(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"results": [{"slug": "legend"}], "total": 1, "query": "legend"})

        client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://site")
        fetcher = HttpSearchFetcher(client=client)

        assert fetcher("legend") == [{"slug": "legend"}]
        assert seen == {"q": "legend", "limit": "10"}
        fetcher.close()

    def test_server_error_raises(self) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "unavailable"})),
            base_url="http://site",
        )
        fetcher = HttpSearchFetcher(client=client)

        with pytest.raises(SearchFetchError):
            fetcher("map")

    def test_invalid_json_raises(self) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
            base_url="http://site",
        )
        fetcher = HttpSearchFetcher(client=client)

        with pytest.raises(SearchFetchError):
            fetcher("map")

    @pytest.mark.parametrize("body", [[1], {"total": 0}, {"results": "none"}])
    def test_unexpected_body_raises(self, body) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body)),
            base_url="http://site",
        )
        fetcher = HttpSearchFetcher(client=client)

        with pytest.raises(SearchFetchError):
            fetcher("map")

    def test_non_object_body_resets_search_box(self, navigate: MagicMock) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[1])),
            base_url="http://site",
        )
        box = SearchBox(HttpSearchFetcher(client=client), navigate=navigate)

        box.perform_search("map")

        assert box.state is SearchState.IDLE
        assert not box.is_loading
        assert not box.is_open
        assert box.results == []

    def test_works_with_search_box(self, navigate: MagicMock, timers: TimerFactory) -> None:
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
            base_url="http://site",
        )
        box = SearchBox(HttpSearchFetcher(client=client), navigate=navigate, timer_factory=timers)

        type_and_wait(box, timers, "map")

        assert box.state is SearchState.IDLE
        assert box.results == []
