"""Formatting utilities for currency and dates."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional, Union

from .config import CURRENCY_SYMBOL


def format_currency(amount: Union[float, int, None], symbol: Optional[str] = None, include_sign: bool = True) -> str:
    """Format a currency amount with thousands separators and two decimals.

    Negative amounts put the minus before the symbol.  ``None`` and NaN
    render as zero.

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-123.45)
        '-$123.45'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    value = float(amount or 0)
    if math.isnan(value):
        value = 0.0
    symbol = CURRENCY_SYMBOL if symbol is None else symbol
    formatted = f"{abs(value):,.2f}"
    if include_sign:
        formatted = f"{symbol}{formatted}"
    # -0.004 rounds to 0.00 and should not show a sign
    return f"-{formatted}" if value < 0 and round(value, 2) != 0 else formatted


def format_amount(amount: Union[float, int, None]) -> str:
    """Plain two-decimal rendering used in export rows, e.g. ``'12.50'``."""
    value = float(amount or 0)
    if math.isnan(value):
        value = 0.0
    return f"{value:.2f}"


def escape_dollar_for_markdown(amount: float) -> str:
    """Format a dollar amount and escape the dollar sign for markdown rendering.

    Streamlit markdown treats ``$`` as a LaTeX delimiter, which italicizes
    text between two amounts.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return format_currency(amount).replace("$", "\\$")


def format_display_date(value: Union[str, date, None], pattern: str = '%b %d, %Y') -> str:
    """Render an ISO date as ``Jan 15, 2024``; unparsable input comes back unchanged."""
    if value is None:
        return ''
    if isinstance(value, datetime):
        return value.strftime(pattern)
    if isinstance(value, date):
        return value.strftime(pattern)
    try:
        return date.fromisoformat(str(value).strip()).strftime(pattern)
    except ValueError:
        return str(value)
