"""Split a stream selection into Helix-compliant shards."""

import logging

from twitch_viewers.core.errors import InvalidFilter
from twitch_viewers.models import StreamFilter

logger = logging.getLogger(__name__)

# Helix accepts at most 100 values per repeated query parameter
MAX_VALUES_PER_FIELD = 100
MAX_PAGE_SIZE = 100


def validate(stream_filter: StreamFilter) -> None:
    """Reject filters Helix would refuse. ``user_logins`` is exempt: it is chunked."""
    if not 1 <= stream_filter.first <= MAX_PAGE_SIZE:
        raise InvalidFilter(f"first must be between 1 and {MAX_PAGE_SIZE}, got {stream_filter.first}")

    for name in ("game_ids", "languages", "user_ids"):
        values = getattr(stream_filter, name)
        if values is not None and len(values) > MAX_VALUES_PER_FIELD:
            raise InvalidFilter(
                f"{name} has {len(values)} entries, Helix accepts at most {MAX_VALUES_PER_FIELD}"
            )


def chunk(values: list[str], size: int = MAX_VALUES_PER_FIELD) -> list[list[str]]:
    return [values[i : i + size] for i in range(0, len(values), size)]


def plan(stream_filter: StreamFilter, *, legacy: bool = False) -> list[StreamFilter]:
    """Return the shards to query for *stream_filter*.

    ``user_logins`` beyond 100 entries are split into consecutive chunks,
    every other field copied unchanged. Helix ORs logins together, so the
    union of the shards' results equals the logical query.

    With ``legacy=True`` a filter without ``user_logins`` yields no shard at
    all, which is how the first deployments behaved. Otherwise at least one
    shard is always returned; a filter with no selector at all queries every
    live stream.
    """
    validate(stream_filter)

    logins = stream_filter.user_logins
    if logins is None:
        if legacy:
            logger.warning("Legacy planner: no user_logins in filter, nothing to poll")
            return []
        return [stream_filter]

    if len(logins) <= MAX_VALUES_PER_FIELD:
        return [stream_filter]

    shards = [
        stream_filter.model_copy(update={"user_logins": part}) for part in chunk(logins)
    ]
    logger.debug(f"Split {len(logins)} user_logins into {len(shards)} shards")
    return shards
