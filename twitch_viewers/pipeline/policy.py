"""How a batch reaches the sink, and what happens when it does not."""

import logging
from collections.abc import Sequence
from typing import Protocol

from twitch_viewers.core.errors import SinkError
from twitch_viewers.models import Datapoint

logger = logging.getLogger(__name__)


class MetricsSink(Protocol):
    async def submit(self, batch: Sequence[Datapoint]) -> int: ...


class SubmissionPolicy(Protocol):
    async def submit(self, sink: MetricsSink, batch: Sequence[Datapoint]) -> int: ...


class FireAndForget:
    """Send once. A failed batch is logged and dropped."""

    def __init__(self) -> None:
        self.submitted = 0
        self.lost = 0

    async def submit(self, sink: MetricsSink, batch: Sequence[Datapoint]) -> int:
        try:
            count = await sink.submit(batch)
        except SinkError as e:
            self.lost += len(batch)
            logger.error(f"Error writing metrics, {len(batch)} datapoints lost: {e}")
            return 0

        self.submitted += count
        return count
