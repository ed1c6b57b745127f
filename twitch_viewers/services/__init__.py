"""HTTP clients for Twitch and Warp 10."""

from .twitch_api import TwitchAPIClient
from .warp10 import Warp10Sink

__all__ = ["TwitchAPIClient", "Warp10Sink"]
