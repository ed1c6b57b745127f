"""Game id → display name, memoized for the lifetime of a polling loop.

Each loop owns its own ``CategoryResolver``; nothing is shared between
loops, so the cache needs no locking.
"""

import logging
import time
from collections.abc import Callable, MutableMapping
from typing import Protocol

from cachetools import TTLCache  # type: ignore[import-untyped]

from twitch_viewers.core.config import DEFAULT_CATEGORY_FALLBACK
from twitch_viewers.core.errors import TwitchAPIError
from twitch_viewers.models import Game, StreamRecord

logger = logging.getLogger(__name__)

# Bound for the optional expiring cache; Twitch has well under this many categories live at once
TTL_CACHE_MAXSIZE = 50_000


class GamesAPI(Protocol):
    async def get_games(self, game_ids: list[str]) -> list[Game]: ...


class CategoryResolver:
    """Resolve category names, substituting a fallback label on failure.

    A failed or empty lookup is cached as the fallback too, so an unknown
    category costs one request per run rather than one per stream.

    With *ttl* set, names expire after that many seconds and are looked up
    again; without it the cache only ever grows. *timer* is the clock the
    expiring cache reads.
    """

    def __init__(
        self,
        api: GamesAPI,
        fallback: str = DEFAULT_CATEGORY_FALLBACK,
        *,
        ttl: float | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._api = api
        self.fallback = fallback
        self._cache: MutableMapping[str, str]
        if ttl is None:
            self._cache = {}
        else:
            self._cache = TTLCache(maxsize=TTL_CACHE_MAXSIZE, ttl=ttl, timer=timer)
        self.lookups = 0

    @property
    def size(self) -> int:
        return len(self._cache)

    def cached(self, game_id: str) -> str | None:
        return self._cache.get(game_id)

    async def resolve(self, game_id: str, record: StreamRecord | None = None) -> str:
        """Return the display name for *game_id*. Never raises."""
        name = self._cache.get(game_id)
        if name is not None:
            return name

        if not game_id:
            # Streams without a category carry an empty game_id
            name = self.fallback
        else:
            name = await self._lookup(game_id, record)

        self._cache[game_id] = name
        return name

    async def _lookup(self, game_id: str, record: StreamRecord | None) -> str:
        self.lookups += 1
        try:
            games = await self._api.get_games([game_id])
        except TwitchAPIError as e:
            logger.warning(
                f"Category lookup failed for game_id={game_id} ({type(e).__name__}: {e}); "
                f"using '{self.fallback}'. Record: {record!r}"
            )
            return self.fallback

        for game in games:
            if game.id == game_id:
                return game.name

        if games:
            return games[0].name

        logger.warning(
            f"Unknown category game_id={game_id}; using '{self.fallback}'. Record: {record!r}"
        )
        return self.fallback
