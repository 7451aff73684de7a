from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import TomlConfigSettingsSource

from .config import BUILTIN_PLUGINS_DIR, HOME_CONFIG_PATH, HOME_DIR, ConfigError

DEFAULT_PREFIXES = [".", "!", "#"]


class BotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="WAPLUG__",
        env_nested_delimiter="__",
    )

    bot_name: str = "Waplug"
    owner_numbers: list[str] = Field(default_factory=list)
    prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_PREFIXES))

    plugins_dir: Path = BUILTIN_PLUGINS_DIR
    database_path: Path = HOME_DIR / "db" / "database.json"
    temp_dir: Path = HOME_DIR / "temp"

    auto_bio: bool = False
    bio_interval: float = 60.0
    timezone: str = "Asia/Jakarta"

    brat_api_url: str = "https://api.hamsoffc.me/tools/brat"
    brat_api_key: str = "hamsoffc"

    @field_validator("bot_name", mode="before")
    @classmethod
    def _validate_bot_name(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("bot_name must be a string")
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("bot_name must be a non-empty string")
        return cleaned

    @field_validator("owner_numbers", mode="before")
    @classmethod
    def _validate_owner_numbers(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("owner_numbers must be a list of numbers")
        numbers: list[str] = []
        for item in value:
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                raise ValueError("owner_numbers entries must be strings or integers")
            digits = "".join(ch for ch in str(item) if ch.isdigit())
            if not digits:
                raise ValueError(f"owner number {item!r} has no digits")
            numbers.append(digits)
        return numbers

    @field_validator("prefixes", mode="before")
    @classmethod
    def _validate_prefixes(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ValueError("prefixes must be a list of strings")
        for item in value:
            if not isinstance(item, str) or not item:
                raise ValueError("prefixes entries must be non-empty strings")
        # order is significant: the first matching prefix wins
        return value

    @field_validator("bio_interval")
    @classmethod
    def _validate_bio_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("bio_interval must be positive")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(path: str | Path | None = None) -> tuple[BotSettings, Path]:
    """Load settings from TOML (if the file exists) and ``WAPLUG__*`` env vars."""
    cfg_path = Path(path).expanduser() if path else HOME_CONFIG_PATH
    if cfg_path.exists() and not cfg_path.is_file():
        raise ConfigError(f"Config path {cfg_path} exists but is not a file.") from None
    cfg = dict(BotSettings.model_config)
    if cfg_path.exists():
        cfg["toml_file"] = cfg_path
    Bound = type(
        "BotSettingsBound",
        (BotSettings,),
        {"model_config": SettingsConfigDict(**cfg)},
    )
    try:
        return Bound(), cfg_path
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {cfg_path}: {exc}") from exc


def validate_settings_data(data: dict[str, Any], *, config_path: Path) -> BotSettings:
    try:
        return BotSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc
