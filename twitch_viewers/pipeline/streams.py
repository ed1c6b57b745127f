"""One tick of the stream viewers pipeline."""

import logging
from collections.abc import Sequence
from datetime import datetime

from twitch_viewers.models import StreamFilter
from twitch_viewers.pipeline.assembler import assemble
from twitch_viewers.pipeline.categories import CategoryResolver
from twitch_viewers.pipeline.paginator import StreamsAPI, drain
from twitch_viewers.pipeline.policy import FireAndForget, MetricsSink, SubmissionPolicy

logger = logging.getLogger(__name__)


class StreamViewersJob:
    """Poll every shard and push one datapoint per qualifying live stream.

    Shards are processed one after the other and each page is flushed to
    the sink as soon as it has been assembled.
    """

    def __init__(
        self,
        *,
        api: StreamsAPI,
        shards: Sequence[StreamFilter],
        resolver: CategoryResolver,
        sink: MetricsSink,
        event_name: str,
        prefix: str,
        minimum_viewers: int = 0,
        policy: SubmissionPolicy | None = None,
    ):
        self.api = api
        self.shards = list(shards)
        self.resolver = resolver
        self.sink = sink
        self.event_name = event_name
        self.prefix = prefix
        self.minimum_viewers = minimum_viewers
        self.policy: SubmissionPolicy = policy or FireAndForget()

    async def __call__(self, timestamp: datetime) -> None:
        await self.run_tick(timestamp)

    async def run_tick(self, timestamp: datetime) -> int:
        """Drain every shard once; return the number of datapoints written."""
        written = 0
        for shard in self.shards:
            written += await self._process_shard(shard, timestamp)

        logger.info(
            f"{written} metrics wrote to warp10 "
            f"({len(self.shards)} shard(s), {self.resolver.size} cached categories)"
        )
        return written

    async def _process_shard(self, shard: StreamFilter, timestamp: datetime) -> int:
        written = 0
        async for records in drain(self.api, shard, self.minimum_viewers):
            batch = []
            for record in records:
                game_name = await self.resolver.resolve(record.game_id, record)
                batch.append(assemble(record, game_name, timestamp, self.event_name, self.prefix))

            if batch:
                written += await self.policy.submit(self.sink, batch)
        return written
