"""
Display formatting helpers for rendered insight messages.

Currency is the only localised quantity: amounts are rendered with the
configured currency symbol, thousands separators and no decimals.
"""

from typing import Optional

from payout_insights.core.config import get_settings
from payout_insights.models import PLATFORM_LABELS, Platform


def format_currency(value: float, symbol: Optional[str] = None) -> str:
    """
    Render an amount as whole currency units.

    Examples:
        >>> format_currency(1234.56, "€")
        '€1,235'
        >>> format_currency(-500, "€")
        '-€500'
    """
    if symbol is None:
        symbol = get_settings().currency_symbol
    rounded = round(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.0f}"


def format_percent(ratio: float, decimals: int = 0) -> str:
    """Render a ratio (0.25) as a percentage string ('25%')."""
    return f"{ratio * 100:.{decimals}f}%"


def format_signed_percent(ratio: float, decimals: int = 0) -> str:
    prefix = "+" if ratio >= 0 else ""
    return f"{prefix}{ratio * 100:.{decimals}f}%"


def platform_label(platform: Platform) -> str:
    return PLATFORM_LABELS.get(platform, platform.value)
