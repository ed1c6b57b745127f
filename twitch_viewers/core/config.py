"""Exporter configuration.

Settings come from, in increasing priority: environment / ``.env``, an
optional YAML file, then command-line flags. All three feed the same
``Settings`` model so there is a single validated shape for every
deployment.
"""

import argparse
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from twitch_viewers.models import StreamFilter

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_FALLBACK = "Pas de catégorie"

# YAML sections flattened into prefixed field names
_NESTED_SECTIONS = ("twitch", "warp10", "chat")


class Settings(BaseSettings):
    """Exporter settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch app credentials
    twitch_client_id: str = Field(..., description="Twitch OAuth Client ID")
    twitch_client_secret: str = Field(..., description="Twitch OAuth Client Secret")

    # Warp 10
    warp10_url: str = Field(..., description="Warp 10 base URL")
    warp10_write_token: str = Field(..., description="Warp 10 write token")
    warp10_prefix: str = Field(..., description="Prefix of every class name")

    # Stream viewers loop
    event_name: str = Field(..., description="Value of the event_name label")
    minimum_viewers: int = Field(default=0, ge=0, description="Early-stop viewer threshold")
    filters: StreamFilter = Field(
        default_factory=StreamFilter, description="Stream selection (JSON in env)"
    )
    interval_seconds: float = Field(default=15.0, ge=1.0, description="Tick interval")
    legacy_planner: bool = Field(
        default=False, description="Emit no shard when user_logins is absent"
    )

    # Category lookups
    category_fallback: str = Field(default=DEFAULT_CATEGORY_FALLBACK)
    category_cache_ttl: float | None = Field(
        default=None, gt=0, description="Expire cached names after N seconds"
    )

    # Chat statistics loop
    chat_video_ids: list[str] = Field(default_factory=list, description="VOD ids to watch")
    chat_interval_seconds: float = Field(default=60.0, ge=1.0)
    chat_max_pages: int = Field(default=50, ge=1)

    # Runtime
    http_timeout: float = Field(default=10.0, gt=0)
    health_port: int | None = Field(default=None, description="Health server port")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("warp10_url")
    @classmethod
    def validate_warp10_url(cls, v: str) -> str:
        """Warp 10 URL must be http(s); trailing slash is dropped"""
        if not v.startswith(("http://", "https://")):
            raise ValueError("WARP10_URL must start with 'http://' or 'https://'")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def viewers_metric(self) -> str:
        return f"{self.warp10_prefix}.viewers"

    @property
    def chat_enabled(self) -> bool:
        return bool(self.chat_video_ids)


def read_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file and flatten its nested sections.

    ``twitch: {client_id: ...}`` becomes ``twitch_client_id``, matching the
    field names used for environment variables.
    """
    with path.open(encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a YAML mapping")

    flat: dict[str, Any] = {}
    for key, value in raw.items():
        if key in _NESTED_SECTIONS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}_{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twitch-viewers",
        description="Poll Twitch live streams and push viewer counts to Warp 10.",
    )
    parser.add_argument("config", nargs="?", type=Path, help="YAML configuration file")
    parser.add_argument("--interval", type=float, dest="interval_seconds")
    parser.add_argument("--minimum-viewers", type=int, dest="minimum_viewers")
    parser.add_argument("--log-level", dest="log_level")
    parser.add_argument("--health-port", type=int, dest="health_port")
    return parser


def load_settings(argv: list[str] | None = None) -> Settings:
    """Build settings from env, optional YAML file and CLI flags."""
    args = build_parser().parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.config is not None:
        overrides.update(read_yaml_config(args.config))
        logger.debug(f"Loaded configuration file {args.config}")

    for name in ("interval_seconds", "minimum_viewers", "log_level", "health_port"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value

    return Settings(**overrides)
