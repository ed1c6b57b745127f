"""Exporter entry point: build settings, authorize, start the polling loops."""

import asyncio
import logging

from pydantic import ValidationError

from twitch_viewers.core import (
    AuthError,
    HealthCheckServer,
    InvalidFilter,
    Settings,
    load_settings,
    setup_logging,
)
from twitch_viewers.pipeline import (
    CategoryResolver,
    ChatStatsJob,
    PollingLoop,
    StreamViewersJob,
    plan,
)
from twitch_viewers.services import TwitchAPIClient, Warp10Sink

logger = logging.getLogger("twitch_viewers")


def build_loops(settings: Settings, api: TwitchAPIClient, sink: Warp10Sink) -> list[PollingLoop]:
    """Create one loop per enabled data source.

    Raises ``InvalidFilter`` when the configured filter cannot be sent.
    """
    loops: list[PollingLoop] = []

    shards = plan(settings.filters, legacy=settings.legacy_planner)
    if shards:
        logger.info(f"Polling {len(shards)} stream shard(s) every {settings.interval_seconds}s")
        job = StreamViewersJob(
            api=api,
            shards=shards,
            resolver=CategoryResolver(
                api, settings.category_fallback, ttl=settings.category_cache_ttl
            ),
            sink=sink,
            event_name=settings.event_name,
            prefix=settings.warp10_prefix,
            minimum_viewers=settings.minimum_viewers,
        )
        loops.append(PollingLoop("twitch", settings.interval_seconds, job))

    if settings.chat_enabled:
        logger.info(
            f"Polling chat of {len(settings.chat_video_ids)} video(s) "
            f"every {settings.chat_interval_seconds}s"
        )
        chat_job = ChatStatsJob(
            api=api,
            video_ids=settings.chat_video_ids,
            sink=sink,
            event_name=settings.event_name,
            prefix=settings.warp10_prefix,
            max_pages=settings.chat_max_pages,
        )
        loops.append(PollingLoop("chat", settings.chat_interval_seconds, chat_job))

    return loops


async def run(settings: Settings) -> int:
    try:
        api = TwitchAPIClient(
            settings.twitch_client_id, settings.twitch_client_secret, timeout=settings.http_timeout
        )
    except ValueError as e:
        logger.error(f"Invalid Twitch credentials: {e}")
        return 1

    try:
        sink = Warp10Sink(
            settings.warp10_url, settings.warp10_write_token, timeout=settings.http_timeout
        )
    except ValueError as e:
        logger.error(f"Invalid Warp 10 settings: {e}")
        await api.close()
        return 1

    health: HealthCheckServer | None = None

    try:
        try:
            loops = build_loops(settings, api, sink)
        except InvalidFilter as e:
            logger.error(f"Invalid FILTERS: {e}")
            return 1

        if not loops:
            logger.error("Nothing to poll: no stream shard and no chat video configured")
            return 1

        try:
            await api.authorize()
        except AuthError as e:
            logger.error(f"Failed to get access token: {e}")
            return 1

        if settings.health_port:
            health = HealthCheckServer(loops, port=settings.health_port)
            try:
                await health.start()
            except OSError as e:
                logger.error(f"Failed to start health server on port {settings.health_port}: {e}")
                return 1

        await asyncio.gather(*(loop.run() for loop in loops))
        return 0
    finally:
        if health:
            await health.stop()
        await api.close()
        await sink.close()


def main(argv: list[str] | None = None) -> int:
    setup_logging()

    try:
        settings = load_settings(argv)
    except (ValidationError, ValueError, OSError) as e:
        logger.error(f"Missing or invalid configuration: {e}")
        return 1

    setup_logging(settings.log_level)

    try:
        return asyncio.run(run(settings))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Exporter stopped")
        return 0
