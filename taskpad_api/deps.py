"""FastAPI dependencies for caller identity."""

from __future__ import annotations

from fastapi import Query


async def get_owner_id(
    owner_id: str | None = Query(None, alias="ownerId", description="Authenticated user id"),
    uid: str | None = Query(None, description="Legacy alias for ownerId"),
) -> str | None:
    """Return the caller-supplied identity.

    The identity provider sits in front of this service; the value is trusted
    as-is and only checked for presence by the task service.
    """
    return (owner_id or uid or "").strip() or None
