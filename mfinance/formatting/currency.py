"""
Currency Formatter

Renders a signed decimal amount for display:

    format_amount(Decimal("-1234567.5"), FormattingConfig(
        currency_symbol="€", thousands_separator=" ", decimal_separator=","
    ))
    -> "-€1 234 567,5"

DESIGN DECISION: The minus sign always comes first. A prefix symbol sits
between the sign and the digits, a suffix symbol after the last digit.
One convention, everywhere.

Display separators never reach the CSV file. Only the Record Codec
writes persisted amounts.
"""

from decimal import Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN, ROUND_HALF_EVEN, localcontext
from typing import Optional

from mfinance.errors import FormatError
from mfinance.models.formatting import CurrencyPosition, FormattingConfig


_FORBIDDEN_SEPARATORS = set("0123456789+-")


def validate_config(config: FormattingConfig) -> None:
    """
    Check that amounts rendered under ``config`` are unambiguous.

    Raises:
        FormatError: Separators are equal, or collide with digits or signs
    """
    if config.thousands_separator == config.decimal_separator:
        raise FormatError(
            "Thousands separator and decimal separator must differ, "
            f"both are '{config.thousands_separator}'"
        )
    for name in ("thousands_separator", "decimal_separator"):
        value = getattr(config, name)
        if value in _FORBIDDEN_SEPARATORS:
            raise FormatError(f"Invalid {name} '{value}'")


def round_amount(amount: Decimal, places: int) -> Decimal:
    """Round half to even at ``places`` decimals without losing integer digits."""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


def _group_digits(digits: str, separator: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]]
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return separator.join(groups)


def format_amount(
    amount: Decimal,
    config: Optional[FormattingConfig] = None,
    places: Optional[int] = None,
) -> str:
    """
    Render ``amount`` as a display string.

    Args:
        amount: Finite decimal amount
        config: Resolved formatting settings (defaults when None)
        places: Round to this many decimals first. When None the
                amount's own digits are shown unchanged.

    Raises:
        FormatError: The configuration is inconsistent
    """
    config = config or FormattingConfig()
    validate_config(config)

    if places is not None:
        amount = round_amount(amount, places)

    integer, _, fraction = format(amount.copy_abs(), "f").partition(".")
    number = _group_digits(integer, config.thousands_separator)
    if fraction:
        number = f"{number}{config.decimal_separator}{fraction}"

    sign = "-" if amount < 0 else ""
    if config.currency_position is CurrencyPosition.SUFFIX:
        return f"{sign}{number}{config.currency_symbol}"
    return f"{sign}{config.currency_symbol}{number}"
