from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cardledger.application.classifier import DifficultyThresholds
from cardledger.domain.constants import (
    LEARNING_MAX_INTERVAL,
    NEW_MAX_INTERVAL,
    PROGRESS_WINDOW_DAYS,
    SESSION_HISTORY_LIMIT,
    STREAK_WINDOW_DAYS,
    YOUNG_MAX_INTERVAL,
)

CONFIG_FILE = Path.home() / ".config/cardledger/config.toml"


class AppConfig(BaseSettings):
    """
    Configuration model for cardledger.
    Supports loading from:
    1. Environment variables (CARDLEDGER_*)
    2. Config file (~/.config/cardledger/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="CARDLEDGER_",
        toml_file=CONFIG_FILE,
        extra="ignore",
    )

    # Storage
    backend: Literal["yaml", "memory"] = "yaml"
    data_file: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/cardledger/ledger.yaml"
    )
    validate_on_save: bool = True

    # Difficulty buckets (closed upper bounds, in days)
    new_max_interval: int = NEW_MAX_INTERVAL
    learning_max_interval: int = LEARNING_MAX_INTERVAL
    young_max_interval: int = YOUNG_MAX_INTERVAL

    # History and reporting windows
    session_history_limit: int = Field(default=SESSION_HISTORY_LIMIT, ge=1)
    streak_window_days: int = Field(default=STREAK_WINDOW_DAYS, ge=1)
    progress_window_days: int = Field(default=PROGRESS_WINDOW_DAYS, ge=1)

    verbose: int = 1

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

        # Earlier sources win: CLI overrides, then env, then the TOML file
        if CONFIG_FILE.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=CONFIG_FILE),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", mode="before")
    @classmethod
    def resolve_data_file(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @model_validator(mode="after")
    def check_thresholds(self) -> "AppConfig":
        if not 0 < self.new_max_interval < self.learning_max_interval < self.young_max_interval:
            raise ValueError(
                "Interval thresholds must be positive and strictly increasing "
                "(new_max_interval < learning_max_interval < young_max_interval)"
            )
        return self

    @property
    def thresholds(self) -> DifficultyThresholds:
        return DifficultyThresholds(
            new_max=self.new_max_interval,
            learning_max=self.learning_max_interval,
            young_max=self.young_max_interval,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cardledger/config.toml (if exists)
    3. Environment variables (CARDLEDGER_*)
    4. cli_overrides (passed from Typer; None values are ignored)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
