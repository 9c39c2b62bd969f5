"""Display formatting of amounts."""

from mfinance.formatting.currency import format_amount, round_amount, validate_config

__all__ = ["format_amount", "round_amount", "validate_config"]
