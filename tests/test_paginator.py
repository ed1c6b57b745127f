"""Tests for cursor pagination and the minimum-viewer early stop."""

from __future__ import annotations

import logging

import pytest

from tests.conftest import FakeStreamsAPI, build_stream, page_of
from twitch_viewers.core.errors import DeserializationError, TransportError
from twitch_viewers.models import StreamFilter
from twitch_viewers.pipeline.paginator import PaginationState, apply_minimum_viewers, drain


async def _collect(api, shard, minimum_viewers=0) -> list[list[str]]:
    return [[r.user_login for r in records] async for records in drain(api, shard, minimum_viewers)]


# ---------------------------------------------------------------------------
# PaginationState transitions
# ---------------------------------------------------------------------------


class TestPaginationState:
    def test_full_page_with_cursor_continues(self) -> None:
        state = PaginationState(shard=StreamFilter(first=2))
        state.advance(2, "cursor-1")

        assert not state.finished
        assert state.after == "cursor-1"
        assert state.request.after == "cursor-1"

    def test_full_page_without_cursor_is_done(self) -> None:
        state = PaginationState(shard=StreamFilter(first=2))
        state.advance(2, None)

        assert state.finished

    @pytest.mark.parametrize("cursor", [None, "cursor-1"])
    def test_short_page_is_done_and_clears_cursor(self, cursor) -> None:
        state = PaginationState(shard=StreamFilter(first=2), after="previous")
        state.advance(1, cursor)

        assert state.finished
        assert state.after is None

    def test_request_keeps_shard_selectors(self) -> None:
        state = PaginationState(shard=StreamFilter(user_logins=["a"]), after="c")

        assert state.request.user_logins == ["a"]


# ---------------------------------------------------------------------------
# drain()
# ---------------------------------------------------------------------------


class TestDrain:
    async def test_follows_cursor_until_short_page(self) -> None:
        api = FakeStreamsAPI(
            [
                page_of([build_stream("a", 300), build_stream("b", 200)], cursor="c1"),
                page_of([build_stream("c", 100), build_stream("d", 90)], cursor="c2"),
                page_of([build_stream("e", 10)], cursor="c3"),
            ]
        )

        pages = await _collect(api, StreamFilter(first=2))

        assert pages == [["a", "b"], ["c", "d"], ["e"]]
        assert [r.after for r in api.requests] == [None, "c1", "c2"]

    async def test_full_page_without_cursor_stops(self) -> None:
        api = FakeStreamsAPI([page_of([build_stream("a", 5), build_stream("b", 4)])])

        pages = await _collect(api, StreamFilter(first=2))

        assert pages == [["a", "b"]]
        assert len(api.requests) == 1

    async def test_empty_page_stops(self) -> None:
        api = FakeStreamsAPI([page_of([], cursor="dangling")])

        assert await _collect(api, StreamFilter()) == [[]]
        assert len(api.requests) == 1

    async def test_below_minimum_drops_rest_of_page_and_stops(self) -> None:
        api = FakeStreamsAPI(
            [
                page_of(
                    [build_stream("a", 50), build_stream("b", 10)],
                    cursor="more",
                ),
                page_of([build_stream("z", 1000)]),
            ]
        )

        pages = await _collect(api, StreamFilter(first=2), minimum_viewers=20)

        assert pages == [["a"]]
        assert len(api.requests) == 1

    async def test_out_of_order_page_still_stops_at_first_low_record(self, caplog) -> None:
        api = FakeStreamsAPI(
            [page_of([build_stream("a", 50), build_stream("b", 10), build_stream("c", 40)], "more")]
        )

        with caplog.at_level(logging.WARNING, logger="twitch_viewers.pipeline.paginator"):
            pages = await _collect(api, StreamFilter(first=3), minimum_viewers=20)

        assert pages == [["a"]]
        assert len(api.requests) == 1
        assert "not sorted by viewers" in caplog.text

    async def test_zero_threshold_never_stops_early(self) -> None:
        api = FakeStreamsAPI([page_of([build_stream("a", 0)])])

        assert await _collect(api, StreamFilter(first=5), minimum_viewers=0) == [["a"]]

    @pytest.mark.parametrize(
        "error", [TransportError("boom", status_code=503), DeserializationError("bad json")]
    )
    async def test_error_aborts_shard_after_yielded_pages(self, error, caplog) -> None:
        api = FakeStreamsAPI(
            [
                page_of([build_stream("a", 50), build_stream("b", 40)], cursor="c1"),
                error,
                page_of([build_stream("never", 30)]),
            ]
        )

        with caplog.at_level(logging.ERROR):
            pages = await _collect(api, StreamFilter(first=2))

        assert pages == [["a", "b"]]
        assert len(api.requests) == 2
        assert "Aborting" in caplog.text

    async def test_error_on_first_page_yields_nothing(self) -> None:
        api = FakeStreamsAPI([TransportError("down")])

        assert await _collect(api, StreamFilter()) == []


def test_apply_minimum_viewers_keeps_everything_above_threshold() -> None:
    records = [build_stream("a", 30), build_stream("b", 20)]

    kept, stopped = apply_minimum_viewers(records, 20)

    assert [r.user_login for r in kept] == ["a", "b"]
    assert not stopped
