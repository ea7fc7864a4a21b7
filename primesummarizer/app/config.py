from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..modules.summarize.domain.models import FormatOptions


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    telegram_bot_token: str = Field(..., alias="TELEGRAM_BOT_TOKEN")

    summarize_endpoint: str = Field(
        "https://ai-text-summarizer-21o2.onrender.com",
        alias="SUMMARIZE_ENDPOINT",
    )
    request_timeout: float = Field(60.0, gt=0, alias="REQUEST_TIMEOUT")

    storage_path: Path = Field(Path("./data/state.db"), alias="STORAGE_PATH")

    min_chars: int = Field(5, ge=1, alias="MIN_CHARS")
    debounce_ms: int = Field(800, ge=0, le=10_000, alias="DEBOUNCE_MS")
    highlight_display_limit: Optional[int] = Field(
        3,
        ge=1,
        alias="HIGHLIGHT_DISPLAY_LIMIT",
        description="How many key sentences to show under a summary (empty for all)",
    )

    require_credentials: bool = Field(False, alias="REQUIRE_CREDENTIALS")
    session_idle_seconds: int = Field(3600, ge=60, alias="SESSION_IDLE_SECONDS")
    max_sessions: int = Field(500, ge=1, alias="MAX_SESSIONS")
    default_provider: Optional[str] = Field(None, alias="DEFAULT_PROVIDER")
    default_model: Optional[str] = Field(None, alias="DEFAULT_MODEL")

    format_trim: bool = Field(True, alias="FORMAT_TRIM")
    format_collapse_newlines: bool = Field(True, alias="FORMAT_COLLAPSE_NEWLINES")
    format_collapse_spaces: bool = Field(True, alias="FORMAT_COLLAPSE_SPACES")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", alias="LOG_LEVEL")

    @field_validator("summarize_endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUMMARIZE_ENDPOINT must be an http(s) URL")
        return value

    @field_validator("highlight_display_limit", "default_provider", "default_model", mode="before")
    @classmethod
    def _empty_as_none(cls, value: object) -> object:
        # An empty env value means "not set"
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def default_format_options(self) -> FormatOptions:
        return FormatOptions(
            trim=self.format_trim,
            collapse_newlines=self.format_collapse_newlines,
            collapse_spaces=self.format_collapse_spaces,
        )

    def ensure_dirs(self) -> None:
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
