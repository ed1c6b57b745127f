"""Chat statistics for VODs, polled on its own loop."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from twitch_viewers.core.errors import TwitchAPIError
from twitch_viewers.models import CommentsPage
from twitch_viewers.pipeline.assembler import assemble_chat
from twitch_viewers.pipeline.policy import FireAndForget, MetricsSink, SubmissionPolicy

logger = logging.getLogger(__name__)


class CommentsAPI(Protocol):
    async def get_comments(self, video_id: str, cursor: str | None = None) -> CommentsPage: ...


@dataclass
class ChatStats:
    video_id: str
    channel_id: str = ""
    messages: int = 0
    commenters: set[str] = field(default_factory=set)
    pages: int = 0
    complete: bool = False


class ChatStatsJob:
    """Count replayed chat messages and distinct chatters per VOD."""

    def __init__(
        self,
        *,
        api: CommentsAPI,
        video_ids: Sequence[str],
        sink: MetricsSink,
        event_name: str,
        prefix: str,
        max_pages: int = 50,
        policy: SubmissionPolicy | None = None,
    ):
        self.api = api
        self.video_ids = list(video_ids)
        self.sink = sink
        self.event_name = event_name
        self.prefix = prefix
        self.max_pages = max_pages
        self.policy: SubmissionPolicy = policy or FireAndForget()

    async def __call__(self, timestamp: datetime) -> None:
        await self.run_tick(timestamp)

    async def collect(self, video_id: str) -> ChatStats | None:
        """Walk the comment pages of one VOD. Returns None if any page fails."""
        stats = ChatStats(video_id=video_id)
        cursor: str | None = None

        while stats.pages < self.max_pages:
            try:
                page = await self.api.get_comments(video_id, cursor)
            except TwitchAPIError as e:
                logger.error(
                    f"Comments of video {video_id} failed at page {stats.pages + 1}: "
                    f"{type(e).__name__}: {e}"
                )
                return None

            stats.pages += 1
            for comment in page.comments:
                stats.messages += 1
                stats.commenters.add(comment.commenter.id)
                if not stats.channel_id:
                    stats.channel_id = comment.channel_id

            cursor = page.next
            if not cursor:
                stats.complete = True
                break

        if not stats.complete:
            logger.warning(f"Video {video_id}: stopped after {self.max_pages} pages")
        return stats

    async def run_tick(self, timestamp: datetime) -> int:
        written = 0
        for video_id in self.video_ids:
            stats = await self.collect(video_id)
            if stats is None:
                continue

            batch = assemble_chat(
                video_id,
                stats.channel_id,
                stats.messages,
                len(stats.commenters),
                timestamp,
                self.event_name,
                self.prefix,
            )
            written += await self.policy.submit(self.sink, batch)

        logger.info(f"{written} chat metrics wrote to warp10 ({len(self.video_ids)} video(s))")
        return written
