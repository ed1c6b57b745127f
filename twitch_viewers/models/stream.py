"""Helix payload models for streams, games and VOD comments."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_SIZE = 100


class StreamFilter(BaseModel):
    """Selection sent to ``GET /helix/streams``.

    Also used as a single shard once the planner has split it. Every
    multi-valued selector maps to a repeated query parameter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    after: str | None = None
    before: str | None = None
    first: int = DEFAULT_PAGE_SIZE
    game_ids: list[str] | None = None
    languages: list[str] | None = None
    user_ids: list[str] | None = None
    user_logins: list[str] | None = None

    def has_selector(self) -> bool:
        return any(
            values is not None
            for values in (self.game_ids, self.languages, self.user_ids, self.user_logins)
        )

    def to_params(self) -> list[tuple[str, str]]:
        """Build Helix query parameters, repeating keys for list selectors."""
        params: list[tuple[str, str]] = []
        if self.after:
            params.append(("after", self.after))
        if self.before:
            params.append(("before", self.before))
        params.append(("first", str(self.first)))
        for key, values in (
            ("game_id", self.game_ids),
            ("language", self.languages),
            ("user_id", self.user_ids),
            ("user_login", self.user_logins),
        ):
            for value in values or []:
                params.append((key, value))
        return params

    def describe(self) -> str:
        """Short form for log lines."""
        parts = []
        for name in ("game_ids", "languages", "user_ids", "user_logins"):
            values = getattr(self, name)
            if values is not None:
                parts.append(f"{name}={len(values)}")
        if self.after:
            parts.append(f"after={self.after[:12]}…")
        return f"StreamFilter({', '.join(parts) or 'all'}, first={self.first})"


class StreamRecord(BaseModel):
    """One live stream from ``GET /helix/streams``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    user_id: str
    user_login: str
    user_name: str = ""
    game_id: str = ""
    game_name: str = ""
    type: str = ""
    title: str = ""
    viewer_count: int
    started_at: str = ""
    language: str = ""


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cursor: str | None = None


class StreamsPage(BaseModel):
    """Body of a ``GET /helix/streams`` response."""

    model_config = ConfigDict(extra="ignore")

    data: list[StreamRecord] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @property
    def cursor(self) -> str | None:
        return self.pagination.cursor or None


class Game(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str


class GamesPage(BaseModel):
    """Body of a ``GET /helix/games`` response."""

    model_config = ConfigDict(extra="ignore")

    data: list[Game] = Field(default_factory=list)


class Commenter(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id")
    name: str = ""
    display_name: str = ""


class Comment(BaseModel):
    """A chat message replayed on a VOD."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id")
    channel_id: str = ""
    content_id: str = ""
    content_offset_seconds: float = 0.0
    commenter: Commenter


class CommentsPage(BaseModel):
    """Body of a ``GET /v5/videos/{id}/comments`` response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    comments: list[Comment] = Field(default_factory=list)
    previous: str | None = Field(default=None, alias="_prev")
    next: str | None = Field(default=None, alias="_next")
