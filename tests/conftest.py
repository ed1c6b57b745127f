"""Shared pytest fixtures for the exporter tests.

Fixture summary
---------------
make_stream   factory for StreamRecord objects with sensible defaults.
streams_api   scripted fake of the Helix streams endpoint.
games_api     fake of the Helix games endpoint that counts lookups.
sink          in-memory metrics sink recording every batch.
tick_time     fixed UTC timestamp for one tick.

Nothing here touches the network; HTTP-level tests use respx instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import pytest

from twitch_viewers.core.errors import SinkError
from twitch_viewers.models import Datapoint, Game, StreamFilter, StreamRecord, StreamsPage

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

_SETTINGS_ENV = (
    "TWITCH_CLIENT_ID",
    "TWITCH_CLIENT_SECRET",
    "WARP10_URL",
    "WARP10_WRITE_TOKEN",
    "WARP10_PREFIX",
    "EVENT_NAME",
    "MINIMUM_VIEWERS",
    "FILTERS",
    "INTERVAL_SECONDS",
    "CHAT_VIDEO_IDS",
    "LOG_LEVEL",
    "HEALTH_PORT",
    "CATEGORY_CACHE_TTL",
    "LEGACY_PLANNER",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the developer's shell and .env out of Settings()."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

_stream_ids = iter(range(40_000_000_000, 50_000_000_000))


def build_stream(login: str, viewers: int, game_id: str = "509658", **overrides: Any) -> StreamRecord:
    data: dict[str, Any] = {
        "id": str(next(_stream_ids)),
        "user_id": f"uid-{login}",
        "user_login": login,
        "user_name": login.capitalize(),
        "game_id": game_id,
        "game_name": "",
        "type": "live",
        "title": f"{login} live",
        "viewer_count": viewers,
        "started_at": "2026-10-17T18:00:00Z",
        "language": "fr",
    }
    data.update(overrides)
    return StreamRecord.model_validate(data)


def page_of(records: Sequence[StreamRecord], cursor: str | None = None) -> StreamsPage:
    return StreamsPage.model_validate(
        {
            "data": [r.model_dump() for r in records],
            "pagination": {"cursor": cursor} if cursor else {},
        }
    )


@pytest.fixture
def make_stream():
    return build_stream


@pytest.fixture
def tick_time() -> datetime:
    return datetime(2026, 10, 17, 20, 15, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeStreamsAPI:
    """Serves scripted pages (or raises scripted errors) in order."""

    def __init__(self, responses: Sequence[StreamsPage | Exception] = ()):
        self.responses = list(responses)
        self.requests: list[StreamFilter] = []

    async def get_streams(self, stream_filter: StreamFilter) -> StreamsPage:
        self.requests.append(stream_filter)
        if not self.responses:
            return StreamsPage()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeGamesAPI:
    def __init__(self, names: dict[str, str] | None = None, errors: dict[str, Exception] | None = None):
        self.names = names or {}
        self.errors = errors or {}
        self.calls: list[list[str]] = []

    async def get_games(self, game_ids: list[str]) -> list[Game]:
        self.calls.append(list(game_ids))
        for game_id in game_ids:
            if game_id in self.errors:
                raise self.errors[game_id]
        return [Game(id=g, name=self.names[g]) for g in game_ids if g in self.names]


class RecordingSink:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.batches: list[list[Datapoint]] = []

    async def submit(self, batch: Sequence[Datapoint]) -> int:
        self.batches.append(list(batch))
        if self.fail:
            raise SinkError("HTTP 500 from Warp 10", status_code=500)
        return len(batch)

    @property
    def datapoints(self) -> list[Datapoint]:
        return [point for batch in self.batches for point in batch]


@pytest.fixture
def streams_api() -> FakeStreamsAPI:
    return FakeStreamsAPI()


@pytest.fixture
def games_api() -> FakeGamesAPI:
    return FakeGamesAPI({"509658": "Just Chatting", "21779": "League of Legends"})


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
