"""Currency rounding and display helpers shared by the calculators."""

import math


def round_currency(value: float) -> int:
    """Round to the nearest whole currency unit, halves rounding up."""
    return int(math.floor(value + 0.5))


def format_currency(value: float) -> str:
    """Format a number as currency.

    Whole amounts drop the cents: ``1234`` -> ``"$1,234"``, ``49.5`` -> ``"$49.50"``.
    Negative amounts render as ``"-$1,234"``.
    """
    sign = "-" if value < 0 else ""
    amount = abs(value)
    if float(amount).is_integer():
        return f"{sign}${amount:,.0f}"
    return f"{sign}${amount:,.2f}"


def format_percentage(value: float, decimals: int = 0) -> str:
    """Format a number as a percentage."""
    return f"{value:.{decimals}f}%"
