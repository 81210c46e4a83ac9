from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


def _config_files() -> list[Path]:
    return [
        Path.home() / ".config/prepcards/config.toml",
        Path.home() / ".prepcards.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for prepcards.
    Supports loading from:
    1. Environment variables (PREPCARDS_*)
    2. Config file (~/.config/prepcards/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="PREPCARDS_",
        extra="ignore",
    )

    progress_file: Path = Field(
        default_factory=lambda: Path.home() / ".config/prepcards/progress.json"
    )

    # 0 = warnings only, 1 = info, 2+ = debug. Each -v on the CLI adds one.
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

        toml_file = next((f for f in _config_files() if f.exists()), None)

        # Later sources lose: CLI overrides beat env, env beats the file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("progress_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/prepcards/config.toml (if exists)
    3. Environment variables (PREPCARDS_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
