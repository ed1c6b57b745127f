"""Exception hierarchy for the exporter."""


class ExporterError(Exception):
    """Base class for every error raised by twitch_viewers."""


class InvalidFilter(ExporterError, ValueError):
    """A stream filter breaks a Helix list-size or page-size limit."""


class TwitchAPIError(ExporterError):
    """A Twitch API call could not produce a usable response."""


class TransportError(TwitchAPIError):
    """Network failure or non-2xx status from Twitch."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DeserializationError(TwitchAPIError):
    """Twitch answered, but the body was not the expected shape."""


class AuthError(TwitchAPIError):
    """App access token could not be acquired."""


class SinkError(ExporterError):
    """Warp 10 refused or never received a batch."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
