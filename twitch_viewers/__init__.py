"""Poll Twitch live streams and push viewer counts to Warp 10."""

__version__ = "0.3.0"
