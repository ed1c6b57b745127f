"""Warp 10 metrics sink.

Datapoints are pushed to ``/api/v0/update`` in the GTS input format::

    <timestamp in µs>// <class>{<label>=<value>,...} <value>

Class names, label names and label values are percent-encoded so that
separators such as ``{``, ``,`` or ``=`` inside a stream title or game
name cannot break a line.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from urllib.parse import quote

import httpx

from twitch_viewers.core.errors import SinkError
from twitch_viewers.models import Datapoint

logger = logging.getLogger(__name__)

UPDATE_PATH = "/api/v0/update"
TOKEN_HEADER = "X-Warp10-Token"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _encode(value: str) -> str:
    return quote(value, safe="")


def to_micros(timestamp: datetime) -> int:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    delta = timestamp - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


def format_datapoint(point: Datapoint) -> str:
    """Render one datapoint as a GTS input line (no location, no elevation)."""
    labels = ",".join(f"{_encode(k)}={_encode(v)}" for k, v in point.labels)
    return f"{to_micros(point.timestamp)}// {_encode(point.name)}{{{labels}}} {int(point.value)}"


def format_batch(batch: Sequence[Datapoint]) -> str:
    return "\n".join(format_datapoint(point) for point in batch) + "\n"


class Warp10Sink:
    """Writes datapoint batches to one Warp 10 instance."""

    def __init__(
        self,
        url: str,
        write_token: str,
        *,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ):
        if not write_token:
            raise ValueError("Warp 10 write token is required")

        self.endpoint = f"{url.rstrip('/')}{UPDATE_PATH}"
        self._write_token = write_token
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._http.aclose()

    async def submit(self, batch: Sequence[Datapoint]) -> int:
        """Push *batch* and return how many datapoints were sent.

        Raises ``SinkError`` when the request fails or Warp 10 answers with
        a non-2xx status.
        """
        if not batch:
            return 0

        try:
            response = await self._http.post(
                self.endpoint,
                content=format_batch(batch).encode("utf-8"),
                headers={
                    TOKEN_HEADER: self._write_token,
                    "Content-Type": "text/plain; charset=utf-8",
                },
            )
        except httpx.HTTPError as e:
            raise SinkError(f"POST {self.endpoint} failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise SinkError(
                f"Warp 10 rejected {len(batch)} datapoints: "
                f"HTTP {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.debug(f"{len(batch)} datapoints written to Warp 10")
        return len(batch)
