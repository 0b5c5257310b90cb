"""
Presentation helpers shared by emails, PDFs and assistant answers.
"""

from shared.config.settings import settings


def format_money(cents: int | None, symbol: str | None = None) -> str:
    """
    Render an amount in cents with the configured currency symbol.

        format_money(125050) -> "₦1,250.50"
    """
    symbol = settings.currency_symbol if symbol is None else symbol
    cents = cents or 0
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{abs(cents) / 100:,.2f}"


def item_line(qty: int, name: str, unit_price_cents: int) -> str:
    """One paid line as listed in transaction emails: "2x Jollof Rice (₦12.50)"."""
    return f"{qty}x {name} ({format_money(unit_price_cents)})"
