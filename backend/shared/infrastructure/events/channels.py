"""
Redis Channel Naming.

Every feed table has its own channel: ``changes:<table>``.
"""

from __future__ import annotations

from shared.config.constants import FeedTable

CHANGES_PREFIX = "changes:"


def channel_changes(table: str) -> str:
    """Channel carrying change events for one table."""
    if table not in FeedTable.ALL:
        raise ValueError(f"Unknown feed table: {table!r}")
    return f"{CHANGES_PREFIX}{table}"


def channel_changes_pattern() -> str:
    """Pattern matching every change channel."""
    return f"{CHANGES_PREFIX}*"


def table_from_channel(channel: str) -> str | None:
    """Return the table a change channel belongs to, or None for foreign channels."""
    if not channel.startswith(CHANGES_PREFIX):
        return None
    table = channel[len(CHANGES_PREFIX):]
    return table if table in FeedTable.ALL else None
