"""Labeled observations bound for Warp 10."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Datapoint:
    """One timestamped integer value on a labeled series.

    ``labels`` keeps insertion order so every datapoint of a class carries
    the same label layout.
    """

    timestamp: datetime
    name: str
    labels: tuple[tuple[str, str], ...]
    value: int

    @property
    def label_keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.labels)

    def label(self, key: str) -> str | None:
        for k, v in self.labels:
            if k == key:
                return v
        return None
