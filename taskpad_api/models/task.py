"""Task model."""

from __future__ import annotations

from datetime import timezone

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StringIDMixin, TimestampMixin, OwnerMixin

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"


class Task(StringIDMixin, TimestampMixin, OwnerMixin, Base):
    __tablename__ = "task"

    text: Mapped[str] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING)  # pending, completed
    deadline: Mapped[str] = mapped_column(String(64), default="")
    category: Mapped[str] = mapped_column(String(50), default="Personal")
    # Millisecond timestamps by default, so 32-bit integers are too small.
    order: Mapped[int] = mapped_column(BigInteger)
    created_at_client: Mapped[int | None] = mapped_column(BigInteger, default=None)

    def to_dict(self) -> dict:
        created_at = self.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops tzinfo on the way back out.
            created_at = created_at.replace(tzinfo=timezone.utc)
        data = {
            "id": self.id,
            "text": self.text,
            "status": self.status,
            "deadline": self.deadline,
            "category": self.category,
            "ownerId": self.owner_id,
            "order": self.order,
            "createdAt": created_at.isoformat() if created_at else None,
        }
        if self.created_at_client is not None:
            data["createdAtClient"] = self.created_at_client
        return data

    def __repr__(self) -> str:
        return f"<Task {self.text!r} {self.status}>"
