"""Fixed-interval polling loop."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

TickJob = Callable[[datetime], Awaitable[None]]


class PollingLoop:
    """Run *job* every *interval* seconds, forever.

    The first tick fires immediately. Ticks are scheduled at a fixed rate;
    when a tick overruns, missed ticks are skipped rather than replayed.
    A job that raises is logged and the loop carries on with the next tick.
    """

    def __init__(self, name: str, interval: float, job: TickJob):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self.name = name
        self.interval = interval
        self._job = job

        self.ticks = 0
        self.failures = 0
        self.last_tick_at: datetime | None = None

    async def tick(self) -> None:
        """Run the job once with a fresh timestamp shared by the whole tick."""
        timestamp = datetime.now(timezone.utc)
        self.last_tick_at = timestamp
        self.ticks += 1

        logger.info(f"Run {self.name} at {timestamp.isoformat(timespec='seconds')}")
        try:
            await self._job(timestamp)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.exception(f"{self.name} tick failed: {e}")

    async def run(self, max_ticks: int | None = None) -> None:
        """Tick until cancelled, or *max_ticks* times when given."""
        next_run = time.monotonic()
        done = 0

        while max_ticks is None or done < max_ticks:
            delay = next_run - time.monotonic()
            if delay > 0:
                await asyncio.sleep(delay)

            await self.tick()
            done += 1

            next_run += self.interval
            now = time.monotonic()
            if next_run < now:
                skipped = int((now - next_run) // self.interval) + 1
                logger.warning(f"{self.name} tick overran, skipping {skipped} tick(s)")
                next_run += skipped * self.interval

    def status(self) -> dict:
        return {
            "interval_seconds": self.interval,
            "ticks": self.ticks,
            "failures": self.failures,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
        }
