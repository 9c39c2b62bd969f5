"""
Display Formatting Models

FormattingConfig is the already-resolved configuration the Currency
Formatter consumes. How it was assembled (global file, data file,
defaults) is not its concern. See mfinance.config for that.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


NON_BREAKING_SPACE = "\u00a0"


class CurrencyPosition(str, Enum):
    """Where the currency symbol goes relative to the number."""
    PREFIX = "Prefix"
    SUFFIX = "Suffix"


class FormattingConfig(BaseModel):
    """
    Resolved display settings for amounts.

    Separators are single characters. Whether they are consistent with
    each other is checked when formatting, not here.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    currency_symbol: str = Field(
        default="",
        description="Currency symbol, empty for none"
    )
    currency_position: CurrencyPosition = Field(
        default=CurrencyPosition.PREFIX,
        description="Symbol placement"
    )
    thousands_separator: str = Field(
        default=NON_BREAKING_SPACE,
        min_length=1,
        max_length=1,
        description="Digit group separator"
    )
    decimal_separator: str = Field(
        default=".",
        min_length=1,
        max_length=1,
        description="Replaces '.' in displayed amounts"
    )

    @field_validator('currency_position', mode='before')
    @classmethod
    def normalize_position(cls, v):
        """Accept 'prefix' / 'SUFFIX' as well as the canonical spelling."""
        if isinstance(v, str):
            return v.strip().capitalize()
        return v
