"""Data models shared by the pipeline and the API clients."""

from .datapoint import Datapoint
from .stream import (
    DEFAULT_PAGE_SIZE,
    Comment,
    CommentsPage,
    Game,
    GamesPage,
    StreamFilter,
    StreamRecord,
    StreamsPage,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Comment",
    "CommentsPage",
    "Datapoint",
    "Game",
    "GamesPage",
    "StreamFilter",
    "StreamRecord",
    "StreamsPage",
]
