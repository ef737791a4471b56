"""Task models - re-exports all models and Base.metadata."""

from .base import Base, StringIDMixin, TimestampMixin, OwnerMixin
from .task import Task, STATUS_PENDING, STATUS_COMPLETED

__all__ = [
    "Base",
    "StringIDMixin",
    "TimestampMixin",
    "OwnerMixin",
    "Task",
    "STATUS_PENDING",
    "STATUS_COMPLETED",
]
