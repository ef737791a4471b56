"""Request schemas for the task API."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class TaskCreate(BaseModel):
    text: str | None = None
    deadline: str | None = None
    category: str | None = None
    owner_id: str | None = Field(default=None, validation_alias=AliasChoices("ownerId", "uid"))
    order: Any = None  # non-numeric values fall back to the default rank


class ReorderRequest(BaseModel):
    ordered_ids: Any = Field(default=None, validation_alias=AliasChoices("orderedIds", "ordered_ids"))


class OfflineTaskInput(BaseModel):
    text: str | None = None
    deadline: str | None = None
    category: str | None = None
    order: Any = None
    created_at_client: int | None = Field(
        default=None, validation_alias=AliasChoices("createdAtClient", "created_at_client")
    )


class SyncTasksRequest(BaseModel):
    tasks: list[OfflineTaskInput] | None = None
