from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mneme.domain.constants import (
    DEFAULT_LEARNED_STREAK_THRESHOLD,
    DEFAULT_MIN_INTERVAL_HOURS,
    DEFAULT_UPCOMING_WINDOW_HOURS,
)


def config_file_path() -> Path:
    return Path.home() / ".config/mneme/config.toml"


class AppConfig(BaseSettings):
    """
    Configuration model for mneme.
    Supports loading from:
    1. Environment variables (MNEME_*)
    2. Config file (~/.config/mneme/config.toml)
    3. Manual overrides (CLI / server requests)
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEME_",
        extra="ignore",
    )

    # Storage
    backend: Literal["memory", "yaml"] = "yaml"
    store_path: Path = Field(default_factory=lambda: Path.home() / ".local/share/mneme/store.yaml")

    # Scheduling
    min_interval_hours: float = DEFAULT_MIN_INTERVAL_HOURS
    upcoming_window_hours: float = DEFAULT_UPCOMING_WINDOW_HOURS
    learned_streak_threshold: int = DEFAULT_LEARNED_STREAK_THRESHOLD
    queue_limit: int | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        toml_file = config_file_path()

        # Later sources are lower priority: overrides > env > file
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("store_path", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("min_interval_hours", mode="after")
    @classmethod
    def clamp_min_interval(cls, v: float) -> float:
        # The engine never schedules below its built-in minimum
        return max(DEFAULT_MIN_INTERVAL_HOURS, v)

    @field_validator("queue_limit", mode="after")
    @classmethod
    def non_negative_limit(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("queue_limit must be >= 0")
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/mneme/config.toml (if exists)
    3. Environment variables (MNEME_*)
    4. cli_overrides (passed from Typer or the server)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
