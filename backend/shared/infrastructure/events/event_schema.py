"""
Change Event Schema.

One event per inserted, updated or deleted row. Payloads are deliberately
small: consumers reload the affected state instead of merging the event.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any

from shared.config.constants import ChangeType, FeedTable
from shared.config.settings import settings

MAX_EVENT_SIZE = settings.ws_max_message_size


@dataclass
class ChangeEvent:
    """
    Row-level change notification.

    ``actor`` identifies who triggered the change ({"user_id": ..., "role": ...}).
    """

    type: str
    table: str
    record_id: int | None = None
    actor: dict[str, Any] = field(default_factory=dict)
    ts: str | None = None
    v: int = 1

    def __post_init__(self) -> None:
        if self.type not in ChangeType.ALL:
            raise ValueError(f"ChangeEvent type must be one of {ChangeType.ALL}, got {self.type!r}")

        if self.table not in FeedTable.ALL:
            raise ValueError(f"ChangeEvent table must be one of {FeedTable.ALL}, got {self.table!r}")

        if self.record_id is not None and (not isinstance(self.record_id, int) or self.record_id <= 0):
            raise ValueError("ChangeEvent record_id must be a positive integer or None")

        if self.actor is not None and not isinstance(self.actor, dict):
            raise ValueError("ChangeEvent actor must be a dict or None")

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        data = asdict(self)
        data["actor"] = data["actor"] or {}
        data["ts"] = data["ts"] or datetime.now(timezone.utc).isoformat()
        return json.dumps(data, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "ChangeEvent":
        """Deserialize (and validate) an event from JSON."""
        data = json.loads(json_str)
        return cls(**data)
