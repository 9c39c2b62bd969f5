"""Configuration package."""

from mfinance.config.settings import (
    AppSettings,
    ConfigFile,
    PartialFormatting,
    formatting_for,
    get_settings,
    load_formatting_config,
    resolve,
)

__all__ = [
    "AppSettings",
    "ConfigFile",
    "PartialFormatting",
    "formatting_for",
    "get_settings",
    "load_formatting_config",
    "resolve",
]
