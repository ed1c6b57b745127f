"""Build Warp 10 datapoints from Twitch records."""

from datetime import datetime

from twitch_viewers.models import Datapoint, StreamRecord

VIEWER_LABELS = ("event_name", "stream_id", "game_id", "game_name", "user_id", "user_name")
CHAT_LABELS = ("event_name", "video_id", "channel_id")


def viewers_class(prefix: str) -> str:
    return f"{prefix}.viewers"


def assemble(
    record: StreamRecord,
    category_name: str,
    timestamp: datetime,
    event_name: str,
    prefix: str,
) -> Datapoint:
    """One ``{prefix}.viewers`` datapoint for a live stream."""
    labels = (
        ("event_name", event_name),
        ("stream_id", record.id),
        ("game_id", record.game_id),
        ("game_name", category_name),
        ("user_id", record.user_id),
        ("user_name", record.user_login),
    )
    return Datapoint(
        timestamp=timestamp,
        name=viewers_class(prefix),
        labels=labels,
        value=record.viewer_count,
    )


def assemble_chat(
    video_id: str,
    channel_id: str,
    messages: int,
    commenters: int,
    timestamp: datetime,
    event_name: str,
    prefix: str,
) -> list[Datapoint]:
    """Message and distinct-commenter counts for one VOD."""
    labels = (
        ("event_name", event_name),
        ("video_id", video_id),
        ("channel_id", channel_id),
    )
    return [
        Datapoint(timestamp, f"{prefix}.chat.messages", labels, messages),
        Datapoint(timestamp, f"{prefix}.chat.commenters", labels, commenters),
    ]
