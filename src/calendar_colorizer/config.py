"""Application configuration management."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendar_colorizer.calendar.events import EventColor
from calendar_colorizer.routing.base import TransportMode

# Google Calendar colorIds: Peacock, Graphite, Banana, Grape, Blueberry, Flamingo
DEFAULT_PALETTE: Mapping[EventColor, str] = MappingProxyType({
    EventColor.DEFAULT: "7",
    EventColor.TENTATIVE: "8",
    EventColor.EXTERNAL: "5",
    EventColor.ONE_ON_ONE: "3",
    EventColor.GROUP_MEETING: "9",
    EventColor.INTERVIEW: "4",
})

DEFAULT_TRANSPORTS: Mapping[str, TransportMode] = MappingProxyType({
    "🚗": TransportMode.DRIVING,
    "🚎": TransportMode.TRANSIT,
})


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_COLORIZER_",
        env_file=[
            ".env",  # Project-level defaults (lower priority)
            Path.home() / ".config" / "calendar-colorizer" / ".env",  # User config
        ],
        env_file_encoding="utf-8",
    )

    # Travel settings
    home_address: str | None = Field(
        default=None, description="Origin for travel time calculations"
    )

    # Google settings
    calendar_id: str = Field(default="primary", description="Calendar to colorize")
    google_credentials_file: str = Field(
        default="credentials.json", description="OAuth client credentials filename"
    )
    google_token_file: str = Field(
        default="token.json", description="OAuth token filename"
    )
    google_maps_api_key: str | None = Field(
        default=None, description="Google Maps Directions API key"
    )

    # Processing settings
    skip_check: bool = Field(
        default=True,
        description="Skip already colored or declined events for better performance",
    )
    debug: bool = Field(
        default=False, description="Log a trace line for every event, not just changes"
    )
    dry_run: bool = Field(
        default=False, description="Default to dry-run mode (don't write to the calendar)"
    )
    past_days: int = Field(
        default=1, ge=0, description="Days back to look for last minute changes"
    )
    future_days: int = Field(
        default=28, ge=1, description="Days into the future to colorize"
    )

    # Watcher settings
    poll_interval_seconds: int = Field(
        default=60, ge=5, description="Seconds between calendar change checks"
    )
    watcher_startup_scan: bool = Field(
        default=True, description="Run a full scan when the watcher starts"
    )

    # Paths
    config_dir: Path = Field(
        default=Path.home() / ".config" / "calendar-colorizer",
        description="Configuration directory",
    )
    colorizer_file: str = Field(
        default="colorizer.yaml", description="Classification config filename"
    )
    triggers_file: str = Field(
        default="triggers.yaml", description="Registered triggers filename"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / ".local" / "state" / "calendar-colorizer",
        description="Directory for log files (per-calendar logs written here)",
    )
    log_rotation_size_mb: int = Field(
        default=5, ge=1, description="Max size per log file in MB before rotation"
    )
    log_backup_count: int = Field(
        default=3, ge=0, description="Number of rotated log files to keep"
    )

    @property
    def colorizer_path(self) -> Path:
        """Full path to the classification config file."""
        return self.config_dir / self.colorizer_file

    @property
    def triggers_path(self) -> Path:
        """Full path to the trigger registry file."""
        return self.config_dir / self.triggers_file

    @property
    def credentials_path(self) -> Path:
        return self.config_dir / self.google_credentials_file

    @property
    def token_path(self) -> Path:
        return self.config_dir / self.google_token_file

    def ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)


class ColorizerConfig(BaseModel):
    """Immutable classification constants, passed to the engine and synthesizer."""

    model_config = ConfigDict(frozen=True)

    home_address: str | None = Field(
        default=None, description="Origin for travel lookups; None disables travel events"
    )
    tentative_marker: str = Field(default="?", description="Title prefix of tentative events")
    interview_keyword: str = Field(
        default="interview", description="Lowercase title substring of interviews"
    )
    video_prefixes: tuple[str, ...] = Field(
        default=("Google", "Microsoft Teams"),
        description="Location prefixes of videoconferencing providers",
    )
    link_marker: str = Field(
        default="http", description="Location substring that marks a meeting link"
    )
    transports: Mapping[str, TransportMode] = Field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_TRANSPORTS)),
        description="Title prefix glyph -> transport mode",
    )
    default_transport: str = Field(
        default="🚗", description="Transport for travel lookups without a marker"
    )
    transport_padding_minutes: int = Field(
        default=15, ge=0, description="Minutes added to every travel time"
    )
    travel_title_template: str = Field(
        default="Travel ({marker})", description="Title of synthesized travel events"
    )
    palette: Mapping[EventColor, str] = Field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_PALETTE)),
        description="Color category -> calendar color id",
    )
    dedupe_travel_events: bool = Field(
        default=False,
        description="Look for an existing travel event before creating a new one",
    )

    @field_validator("transports", "palette", mode="after")
    @classmethod
    def freeze_mapping(cls, value: Mapping) -> Mapping:
        return MappingProxyType(dict(value))

    @field_serializer("transports", "palette")
    def dump_mapping(self, value: Mapping) -> dict:
        return dict(value)

    @model_validator(mode="after")
    def validate_transports(self) -> "ColorizerConfig":
        """Ensure the default transport is one of the configured markers."""
        if self.default_transport not in self.transports:
            raise ValueError(
                f"default_transport {self.default_transport!r} is not a configured transport"
            )
        missing = [c.value for c in EventColor if c not in self.palette]
        if missing:
            raise ValueError(f"palette is missing colors: {', '.join(missing)}")
        return self

    def transport_marker(self, title: str) -> str | None:
        """Return the transport glyph prefixing a title, if any."""
        for marker in self.transports:
            if title.startswith(marker):
                return marker
        return None

    def travel_title(self, marker: str) -> str:
        return self.travel_title_template.format(marker=marker)


def load_colorizer_config(path: Path, home_address: str | None = None) -> ColorizerConfig:
    """
    Load classification config from a YAML file.

    Args:
        path: Path to colorizer.yaml. A missing file yields the defaults.
        home_address: Home address from settings; overrides the file's value
            when set.

    Returns:
        The frozen ColorizerConfig.
    """
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        data = data.get("colorizer", data)

    if home_address:
        data["home_address"] = home_address

    return ColorizerConfig(**data)


def save_colorizer_config(path: Path, config: ColorizerConfig) -> None:
    """Save classification config to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {"colorizer": config.model_dump(mode="json", exclude_none=True)}

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
