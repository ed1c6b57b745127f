"""HTTP health check server"""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from aiohttp import web

if TYPE_CHECKING:
    from twitch_viewers.pipeline.scheduler import PollingLoop

logger = logging.getLogger(__name__)


class HealthCheckServer:
    """Liveness endpoint reporting the tick counters of each polling loop"""

    def __init__(self, loops: Sequence["PollingLoop"], host: str = "0.0.0.0", port: int = 4344):
        self.loops = list(loops)
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._heartbeat_task: asyncio.Task | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/ping", self.handle_ping)

    async def handle_health(self, request: web.Request) -> web.Response:
        """Always 200 while the process is up; ``ready`` once every loop has ticked"""
        ready = all(loop.ticks > 0 for loop in self.loops)
        return web.json_response(
            {
                "status": "healthy" if ready else "starting",
                "ready": ready,
                "uptime_seconds": int(time.time() - self._start_time),
                "loops": {loop.name: loop.status() for loop in self.loops},
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        return web.Response(text="pong")

    async def _heartbeat(self) -> None:
        """Periodic heartbeat: log uptime and tick counts"""
        while True:
            await asyncio.sleep(300)
            uptime = int(time.time() - self._start_time)
            ticks = ", ".join(f"{loop.name}={loop.ticks}" for loop in self.loops)
            logger.info(f"Heartbeat: uptime={uptime}s, ticks: {ticks}")

    async def start(self) -> None:
        """Start health check server"""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()

            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()

            self._heartbeat_task = asyncio.create_task(self._heartbeat())

            logger.info(f"Health server started on {self.host}:{self.port}")

        except Exception as e:
            logger.exception(f"Failed to start health server: {e}")
            raise

    async def stop(self) -> None:
        """Stop health check server"""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")
