"""Formatting utilities for currency display."""

from __future__ import annotations

from typing import Union


def format_currency(amount: Union[float, int], symbol: str = "$") -> str:
    """Format a currency amount with thousands separators.

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-5, symbol="₱")
        '-₱5.00'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def escape_dollar_for_markdown(amount: float, symbol: str = "$") -> str:
    """Currency string with ``$`` escaped so Streamlit markdown doesn't read it as LaTeX.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return format_currency(amount, symbol).replace("$", "\\$")
