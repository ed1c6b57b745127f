"""Twitch API client service.

Only app access tokens are used: the exporter reads public data (streams,
games, VOD comments). The token is fetched once by ``authorize()`` and kept
for the lifetime of the process.
"""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from twitch_viewers.core.errors import AuthError, DeserializationError, TransportError
from twitch_viewers.models import CommentsPage, Game, GamesPage, StreamFilter, StreamsPage

logger = logging.getLogger(__name__)

HELIX_BASE = "https://api.twitch.tv/helix"
KRAKEN_BASE = "https://api.twitch.tv/v5"
OAUTH_BASE = "https://id.twitch.tv/oauth2"

ModelT = TypeVar("ModelT", bound=BaseModel)


class TwitchAPIClient:
    """Client for the Twitch endpoints the exporter polls.

    Manages a shared httpx client for connection reuse. Failures are raised
    as ``TransportError`` or ``DeserializationError`` so callers decide
    what a failed call means for them.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ):
        if not client_id or not client_secret:
            raise ValueError("Twitch client_id and client_secret are required")

        self.client_id = client_id
        self.client_secret = client_secret

        # Shared HTTP client: reuses TCP connections across requests
        self._http = http or httpx.AsyncClient(timeout=timeout)

        self._app_token: str | None = None

    async def close(self) -> None:
        """Close the shared HTTP client. Call on shutdown."""
        await self._http.aclose()

    @property
    def authorized(self) -> bool:
        return self._app_token is not None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _app_headers(self) -> dict[str, str]:
        if self._app_token is None:
            raise AuthError("authorize() must be called before querying Twitch")
        return {"Authorization": f"Bearer {self._app_token}", "Client-Id": self.client_id}

    async def _get(
        self,
        url: str,
        params: list[tuple[str, str]] | dict | None,
        model: type[ModelT],
    ) -> ModelT:
        """GET *url* and validate the JSON body against *model*."""
        try:
            response = await self._http.get(url, params=params, headers=self._app_headers())
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise TransportError(
                f"GET {url} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            raise DeserializationError(f"GET {url} returned an unexpected body: {e}") from e

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def authorize(self) -> str:
        """Fetch an app access token with the client-credentials grant."""
        try:
            response = await self._http.post(
                f"{OAUTH_BASE}/token",
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            raise AuthError(f"Token request failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise AuthError(f"Failed to get app token: HTTP {response.status_code}")

        try:
            token = response.json().get("access_token")
        except ValueError as e:
            raise AuthError("Token response is not JSON") from e

        if not token:
            raise AuthError("No access_token in token response")

        self._app_token = token
        logger.info("Twitch app access token acquired")
        return token

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def get_streams(self, stream_filter: StreamFilter) -> StreamsPage:
        """Fetch one page of live streams matching *stream_filter*."""
        return await self._get(f"{HELIX_BASE}/streams", stream_filter.to_params(), StreamsPage)

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    async def get_games(self, game_ids: list[str]) -> list[Game]:
        """Get game information by game IDs. Unknown ids are simply absent."""
        if not game_ids:
            return []

        page = await self._get(
            f"{HELIX_BASE}/games", [("id", game_id) for game_id in game_ids], GamesPage
        )
        return page.data

    # ------------------------------------------------------------------
    # VOD comments
    # ------------------------------------------------------------------

    async def get_comments(self, video_id: str, cursor: str | None = None) -> CommentsPage:
        """Fetch one page of replayed chat for a VOD.

        The first page is addressed by offset, later pages by the ``_next``
        cursor of the previous one.
        """
        params = {"cursor": cursor} if cursor else {"content_offset_seconds": "0"}
        return await self._get(f"{KRAKEN_BASE}/videos/{video_id}/comments", params, CommentsPage)
