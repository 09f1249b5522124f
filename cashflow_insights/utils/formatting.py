"""Display formatting utilities"""

import math
from cashflow_insights.config import settings


def format_currency(value: float | None, symbol: str | None = None) -> str:
    """
    Format an amount as whole currency units with space digit grouping.

    Example:
        120000.4 → "R 120 000"
        -30000   → "-R 30 000"
    """
    symbol = symbol if symbol is not None else settings.currency_symbol
    if value is None or not math.isfinite(value):
        value = 0.0

    rounded = round(value)
    grouped = f"{abs(rounded):,.0f}".replace(",", " ")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol} {grouped}"


def format_percent(ratio: float) -> str:
    """Format a ratio as a percentage with one decimal place (0.2 → "20.0%")"""
    if not math.isfinite(ratio):
        ratio = 0.0
    return f"{ratio * 100:.1f}%"


def format_signed_currency(value: float) -> str:
    """Currency string with an explicit leading + or -"""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{format_currency(abs(value))}"
