"""Bounded in-memory history of generated identifiers."""

from __future__ import annotations

from collections import deque
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from apps.uuid_mcp.identifiers import IdentifierVariant

__all__ = ["DEFAULT_HISTORY_CAPACITY", "HistoryLog", "HistoryRecord"]

DEFAULT_HISTORY_CAPACITY = 100


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    else:
        ts = ts.astimezone(UTC)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HistoryRecord(BaseModel):
    """A single generated identifier."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    identifier: str
    variant: IdentifierVariant
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), alias="createdAt"
    )

    def to_payload(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "variant": self.variant.value,
            "createdAt": _format_timestamp(self.created_at),
        }


class HistoryLog:
    """Insertion-ordered log that evicts its oldest records past ``capacity``."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self._capacity = capacity
        self._records: deque[HistoryRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: HistoryRecord) -> None:
        self._records.append(record)

    def snapshot(self, limit: int) -> list[HistoryRecord]:
        """Return the most recent ``limit`` records, oldest first."""

        if limit < 0:
            raise ValueError("limit must be non-negative")
        if limit == 0:
            return []
        return list(self._records)[-limit:]
