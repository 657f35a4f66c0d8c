"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

Number = Union[Decimal, float, int]


def format_currency(amount: Number, include_sign: bool = True) -> str:
    """Format a currency amount with thousands separators.

    Negative amounts keep their minus sign in front of the dollar sign.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency(-50)
        '-$50.00'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    value = float(amount)
    formatted = f"{abs(value):,.2f}"
    prefix = "-" if value < 0 else ""
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def escape_dollar_for_markdown(amount: Number) -> str:
    """Format a dollar amount with the dollar sign escaped for Streamlit markdown.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return format_currency(amount).replace("$", "\\$")


def format_percentage(value: Number, decimals: int = 1) -> str:
    return f"{float(value):.{decimals}f}%"
