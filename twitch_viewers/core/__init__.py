"""Core modules: settings, errors, logging and the health server."""

from .config import DEFAULT_CATEGORY_FALLBACK, Settings, load_settings, read_yaml_config
from .errors import (
    AuthError,
    DeserializationError,
    ExporterError,
    InvalidFilter,
    SinkError,
    TransportError,
    TwitchAPIError,
)
from .health_server import HealthCheckServer
from .logging import setup_logging

__all__ = [
    # Settings
    "DEFAULT_CATEGORY_FALLBACK",
    "Settings",
    "load_settings",
    "read_yaml_config",
    # Errors
    "AuthError",
    "DeserializationError",
    "ExporterError",
    "InvalidFilter",
    "SinkError",
    "TransportError",
    "TwitchAPIError",
    # Setup functions
    "setup_logging",
    # Services
    "HealthCheckServer",
]
