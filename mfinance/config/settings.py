"""
Configuration Management for mfinance

Uses pydantic-settings for type-safe configuration.

Two kinds of configuration exist:
1. Process settings (log level, where the global config file lives),
   read from MFINANCE_* environment variables and .env
2. Formatting settings, read from up to two TOML files:
   the global file and the file next to the ledger data.
   The data file overrides the global one key by key.

DESIGN DECISION: The two TOML layers are merged by one explicit function,
``resolve``. The ledger engine only ever sees the merged, immutable
FormattingConfig and never the layers themselves.

Example file:

    [formatting]
    currency_symbol = "€"
    currency_position = "Suffix"
    thousands_separator = "."
    decimal_separator = ","
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource

from mfinance.models.formatting import CurrencyPosition, FormattingConfig


DEFAULT_GLOBAL_CONFIG = Path("~/.config/mfinance/config.toml")
DEFAULT_DATA_CONFIG_NAME = "mfinance.toml"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

logger = structlog.get_logger(__name__)


class AppSettings(BaseSettings):
    """
    Process-level settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MFINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for log output"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines instead of console text"
    )
    global_config_path: Path = Field(
        default=DEFAULT_GLOBAL_CONFIG,
        description="Path to the global TOML configuration file"
    )
    data_config_name: str = Field(
        default=DEFAULT_DATA_CONFIG_NAME,
        description="Name of the TOML file looked up next to ledger files"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}. Allowed: {sorted(_LOG_LEVELS)}")
        return level

    def data_config_path(self, ledger_path: Union[str, Path]) -> Path:
        """Config file that applies to one ledger file (or directory)."""
        path = Path(ledger_path)
        directory = path if path.is_dir() else path.parent
        return directory / self.data_config_name


class PartialFormatting(BaseModel):
    """The [formatting] table of one TOML file. Every key is optional."""

    currency_symbol: Optional[str] = None
    currency_position: Optional[CurrencyPosition] = None
    thousands_separator: Optional[str] = Field(default=None, min_length=1, max_length=1)
    decimal_separator: Optional[str] = Field(default=None, min_length=1, max_length=1)

    @field_validator('currency_position', mode='before')
    @classmethod
    def normalize_position(cls, v):
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class ConfigFile(BaseSettings):
    """One TOML configuration layer. Only explicit keyword data is used."""

    model_config = SettingsConfigDict(extra="ignore")

    formatting: PartialFormatting = Field(default_factory=PartialFormatting)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (init_settings,)

    @classmethod
    def read(cls, path: Optional[Union[str, Path]]) -> "ConfigFile":
        """
        Read one layer. A missing file is an empty layer.

        Raises:
            OSError: File exists but cannot be read
            ValueError: Invalid TOML or invalid values
        """
        if path is None:
            return cls()
        source = TomlConfigSettingsSource(cls, toml_file=Path(path).expanduser())
        return cls(**source())

    def overrides(self) -> dict[str, Any]:
        return self.formatting.model_dump(exclude_none=True)


def resolve(
    global_layer: dict[str, Any],
    local_layer: dict[str, Any],
) -> FormattingConfig:
    """
    Merge the two layers over the defaults. Local keys win.

    Raises:
        ValidationError: A merged value is invalid
    """
    return FormattingConfig(**{**global_layer, **local_layer})


def load_formatting_config(
    global_path: Optional[Union[str, Path]] = None,
    data_path: Optional[Union[str, Path]] = None,
) -> FormattingConfig:
    """
    Read both TOML layers and resolve them.

    A broken config file never aborts a command: a warning is logged
    and the defaults are used instead.
    """
    try:
        global_layer = ConfigFile.read(global_path).overrides()
        local_layer = ConfigFile.read(data_path).overrides()
        return resolve(global_layer, local_layer)
    except (OSError, ValueError) as e:
        # ValidationError is a ValueError; TOML decode errors are too
        logger.warning(
            "config_load_failed",
            global_path=str(global_path) if global_path else None,
            data_path=str(data_path) if data_path else None,
            error=str(e),
        )
        return FormattingConfig()


def formatting_for(ledger_path: Union[str, Path]) -> FormattingConfig:
    """Resolved formatting for one ledger file, using process settings."""
    settings = get_settings()
    return load_formatting_config(
        settings.global_config_path,
        settings.data_config_path(ledger_path),
    )


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get process settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()


