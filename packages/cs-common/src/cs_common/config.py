"""
Environment-based configuration management for CallSync.

Uses pydantic-settings to load configuration values from environment
variables and .env files. Components receive a ``Settings`` instance at
construction time; nothing mutates it after load.

All environment variables are prefixed with ``CS_`` to avoid collisions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from ``CS_``-prefixed environment variables.

    Attributes:
        header_marker: Line prefix identifying the transcript header.
        separator_prefix: Line prefix identifying a separator line.
        separator_chars: Characters that make up a separator-only line.
        default_start_time: Start time used when none can be extracted.
        secondary_marker: Audio filename token marking the secondary leg.
        primary_transcript_prefix: Title prefix of primary transcripts.
        primary_transcript_token: Title substring of primary transcripts.
        secondary_transcript_prefix: Title prefix of secondary transcripts.
        secondary_transcript_token: Title substring of secondary transcripts.
        audio_file_types: Document file types treated as playable audio.
        skip_seconds: Step used by skip-back / skip-forward controls.
        playback_speeds: Allowed playback-rate values.
        auto_scroll: Whether transcript auto-scroll starts enabled.
        content_backend: ``file`` or ``http`` content source for the API.
        content_root: Directory served by the file content source.
        content_base_url: Base URL for the HTTP content source.
        http_timeout_s: Per-request timeout for the HTTP content source.
        fetch_max_attempts: Attempts before a content fetch gives up.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Render logs as JSON instead of console output.
        api_host: Bind address for the player API.
        api_port: Bind port for the player API.
    """

    model_config = SettingsConfigDict(
        env_prefix="CS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Transcript format ──
    header_marker: str = Field(default="Call ID:", description="Header line prefix.")
    separator_prefix: str = Field(default="---", description="Separator line prefix.")
    separator_chars: str = Field(default="-=_*", description="Separator-only characters.")
    default_start_time: str = Field(
        default="00:00:00",
        pattern=r"^\d{2}:\d{2}:\d{2}$",
        description="Fallback recording start time.",
    )

    # ── Recording pairing ──
    secondary_marker: str = Field(default="_2", description="Secondary audio marker token.")
    primary_transcript_prefix: str = Field(default="va_", description="Primary transcript prefix.")
    primary_transcript_token: str = Field(
        default="va_transcript",
        description="Primary transcript substring.",
    )
    secondary_transcript_prefix: str = Field(
        default="rt_",
        description="Secondary transcript prefix.",
    )
    secondary_transcript_token: str = Field(
        default="rt_transcript",
        description="Secondary transcript substring.",
    )
    audio_file_types: list[str] = Field(
        default_factory=lambda: ["MP3", "WAV", "M4A"],
        description="Document file types treated as audio.",
    )

    # ── Playback ──
    skip_seconds: float = Field(default=10.0, gt=0.0, description="Skip control step.")
    playback_speeds: list[float] = Field(
        default_factory=lambda: [0.5, 1.0, 1.5, 2.0],
        description="Allowed playback rates.",
    )
    auto_scroll: bool = Field(default=True, description="Initial auto-scroll state.")

    # ── Content sources ──
    content_backend: str = Field(
        default="file",
        pattern=r"^(file|http)$",
        description="Content source used by the player API.",
    )
    content_root: str = Field(default="./content", description="File content source root.")
    content_base_url: str = Field(
        default="http://localhost:8080",
        description="HTTP content source base URL.",
    )
    http_timeout_s: float = Field(default=10.0, gt=0.0, description="HTTP request timeout.")
    fetch_max_attempts: int = Field(default=3, ge=1, description="Fetch attempts.")

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    json_logs: bool = Field(default=True, description="Emit JSON log lines.")

    # ── API ──
    api_host: str = Field(default="0.0.0.0", description="Player API bind address.")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Player API bind port.")

    @field_validator("audio_file_types")
    @classmethod
    def _upper_file_types(cls, value: list[str]) -> list[str]:
        """Normalise audio file types to upper case."""
        return [v.upper() for v in value]

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings.

    Returns:
        The process-wide ``Settings`` instance.
    """
    return Settings()
