"""Client-side task snapshots."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

MAX_TEXT_LENGTH = 100
DEFAULT_CATEGORY = "Personal"

CATEGORIES: dict[str, str] = {
    "Work": "\U0001F4BC",
    "School": "\U0001F3EB",
    "Personal": "\U0001F497",
    "Shopping": "\U0001F6CD\ufe0f",
    "Home things": "\U0001F3E0",
}

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"

LOCAL_ID_PREFIX = "local-"


class Provenance(str, Enum):
    CONFIRMED = "confirmed"
    LOCAL_ONLY = "local-only"


def clean_text(text: str | None) -> str:
    """Trim and validate task text the same way the service does."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("Task text cannot be empty")
    if len(cleaned) > MAX_TEXT_LENGTH:
        raise ValueError(f"Task text must be at most {MAX_TEXT_LENGTH} characters")
    return cleaned


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class TaskView:
    """Immutable task snapshot as the client sees it."""

    id: str
    text: str
    status: str = STATUS_PENDING
    deadline: str = ""
    category: str = DEFAULT_CATEGORY
    order: int | None = None
    created_at: datetime | None = None
    created_at_client: int | None = None
    provenance: Provenance = Provenance.CONFIRMED

    @property
    def is_local(self) -> bool:
        return self.provenance is Provenance.LOCAL_ONLY

    @property
    def local_id(self) -> int | None:
        """Offline buffer key of a local-only task."""
        if not self.is_local:
            return None
        return int(self.id[len(LOCAL_ID_PREFIX):])

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def emoji(self) -> str:
        return CATEGORIES.get(self.category, CATEGORIES[DEFAULT_CATEGORY])

    def with_order(self, order: int) -> "TaskView":
        return replace(self, order=order)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "TaskView":
        order = data.get("order")
        return cls(
            id=str(data["id"]),
            text=data.get("text", ""),
            status=data.get("status") or STATUS_PENDING,
            deadline=data.get("deadline") or "",
            category=data.get("category") or DEFAULT_CATEGORY,
            order=order if isinstance(order, (int, float)) and not isinstance(order, bool) else None,
            created_at=_parse_timestamp(data.get("createdAt")),
            created_at_client=data.get("createdAtClient"),
        )

    @classmethod
    def from_offline(cls, entry: dict[str, Any]) -> "TaskView":
        """Placeholder for a task buffered while offline."""
        return cls(
            id=f"{LOCAL_ID_PREFIX}{entry['localId']}",
            text=entry.get("text", ""),
            deadline=entry.get("deadline") or "",
            category=entry.get("category") or DEFAULT_CATEGORY,
            order=entry.get("order"),
            created_at_client=entry.get("createdAtClient"),
            provenance=Provenance.LOCAL_ONLY,
        )
