"""Cursor pagination over ``GET /helix/streams`` for one shard.

Helix orders live streams by descending viewer count, so once a stream
below ``minimum_viewers`` shows up nothing after it can qualify and the
shard is abandoned for the current tick.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Protocol

from twitch_viewers.core.errors import TwitchAPIError
from twitch_viewers.models import StreamFilter, StreamRecord, StreamsPage

logger = logging.getLogger(__name__)


class StreamsAPI(Protocol):
    async def get_streams(self, stream_filter: StreamFilter) -> StreamsPage: ...


@dataclass
class PaginationState:
    """Cursor and completion flag for one shard during one tick."""

    shard: StreamFilter
    after: str | None = None
    finished: bool = False
    pages: int = 0

    @property
    def request(self) -> StreamFilter:
        """Shard to send for the next page."""
        return self.shard.model_copy(update={"after": self.after})

    def advance(self, record_count: int, cursor: str | None) -> None:
        """Apply the transition for a page of *record_count* records.

        A full page continues only when Helix handed back a cursor. A short
        page means the result set is exhausted, whatever the cursor says.
        """
        self.pages += 1
        if record_count == self.shard.first:
            self.after = cursor
            self.finished = cursor is None
        else:
            self.after = None
            self.finished = True

    def stop(self) -> None:
        self.finished = True


def apply_minimum_viewers(
    records: Sequence[StreamRecord], minimum_viewers: int
) -> tuple[list[StreamRecord], bool]:
    """Keep records up to the first one under the threshold.

    Returns ``(kept, stopped)``. ``stopped`` is True when a record fell
    below ``minimum_viewers``; that record and every later one are dropped.
    """
    for index, record in enumerate(records):
        if record.viewer_count < minimum_viewers:
            dropped = records[index:]
            out_of_order = [r for r in dropped if r.viewer_count >= minimum_viewers]
            if out_of_order:
                logger.warning(
                    f"Streams not sorted by viewers: dropped {len(out_of_order)} record(s) "
                    f"above {minimum_viewers} after {record.user_login} ({record.viewer_count})"
                )
            return list(records[:index]), True
    return list(records), False


async def drain(
    api: StreamsAPI,
    shard: StreamFilter,
    minimum_viewers: int = 0,
) -> AsyncIterator[list[StreamRecord]]:
    """Yield the surviving records of each page until the shard is done.

    A failed request ends the shard for this tick; the error is logged and
    not raised, so the caller moves on to the next shard.
    """
    state = PaginationState(shard=shard, after=shard.after)

    while not state.finished:
        try:
            page = await api.get_streams(state.request)
        except TwitchAPIError as e:
            logger.error(
                f"Aborting {shard.describe()} after {state.pages} page(s): "
                f"{type(e).__name__}: {e}"
            )
            state.stop()
            return

        state.advance(len(page.data), page.cursor)

        records, stopped = apply_minimum_viewers(page.data, minimum_viewers)
        if stopped:
            logger.debug(
                f"Early stop on {shard.describe()} at page {state.pages}: "
                f"viewers below {minimum_viewers}"
            )
            state.stop()

        yield records
