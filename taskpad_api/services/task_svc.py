"""Task service.

Every operation takes the caller identity as a plain argument; ownership is
checked against ``Task.owner_id`` before any write is issued.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ForbiddenError, NotFoundError, StoreError, ValidationError
from ..models.task import STATUS_COMPLETED, STATUS_PENDING, Task
from ..schemas.task import OfflineTaskInput

logger = logging.getLogger(__name__)

_last_timestamp: datetime | None = None


def _server_timestamp() -> datetime:
    """Return a UTC timestamp strictly greater than any previously issued one."""
    global _last_timestamp
    now = datetime.now(timezone.utc)
    if _last_timestamp is not None and now <= _last_timestamp:
        now = _last_timestamp + timedelta(microseconds=1)
    _last_timestamp = now
    return now


def _now_ms() -> int:
    return int(time.time() * 1000)


# Bounds of the BIGINT order and createdAtClient columns.
ORDER_MIN = -(2**63)
ORDER_MAX = 2**63 - 1


def _fits_bigint(value: int) -> bool:
    return ORDER_MIN <= value <= ORDER_MAX


def _coerce_order(value: object) -> int:
    """Use a finite numeric rank that fits the column, otherwise the current time in ms."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _now_ms()
    if isinstance(value, float):
        if not math.isfinite(value):
            return _now_ms()
        value = int(value)
    return value if _fits_bigint(value) else _now_ms()


def _require_owner(owner_id: str | None) -> str:
    if not owner_id or not owner_id.strip():
        raise ValidationError("Missing ownerId")
    return owner_id


def _clean_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Task text cannot be empty")
    if len(cleaned) > settings.max_text_length:
        raise ValidationError(f"Task text must be at most {settings.max_text_length} characters")
    return cleaned


async def _execute(db: AsyncSession, stmt):
    try:
        return await db.execute(stmt)
    except SQLAlchemyError as exc:
        logger.exception("Task store read failed")
        raise StoreError("Task store read failed") from exc


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except (SQLAlchemyError, OverflowError) as exc:
        await db.rollback()
        logger.exception("Task store %s failed", action)
        raise StoreError(f"Task store {action} failed") from exc


async def _owned_task(db: AsyncSession, task_id: str, owner_id: str) -> Task:
    task = await get_task(db, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    if task.owner_id != owner_id:
        raise ForbiddenError("Forbidden")
    return task


async def get_task(db: AsyncSession, task_id: str) -> Task | None:
    result = await _execute(db, select(Task).where(Task.id == task_id))
    return result.scalar_one_or_none()


async def list_tasks(db: AsyncSession, owner_id: str | None) -> list[Task]:
    """All tasks owned by ``owner_id``, newest first."""
    owner_id = _require_owner(owner_id)
    stmt = select(Task).where(Task.owner_id == owner_id).order_by(Task.created_at.desc())
    result = await _execute(db, stmt)
    return list(result.scalars().all())


async def create_task(
    db: AsyncSession,
    owner_id: str | None,
    text: str | None,
    *,
    deadline: str | None = None,
    category: str | None = None,
    order: object = None,
) -> Task:
    owner_id = _require_owner(owner_id)
    task = Task(
        owner_id=owner_id,
        text=_clean_text(text),
        status=STATUS_PENDING,
        deadline=deadline or "",
        category=category or settings.default_category,
        order=_coerce_order(order),
        created_at=_server_timestamp(),
    )
    db.add(task)
    await _commit(db, "write")
    logger.info("Created task %s for owner %s", task.id, owner_id)
    return task


async def toggle_task(db: AsyncSession, task_id: str, owner_id: str | None) -> str:
    """Flip pending <-> completed and return the new status."""
    owner_id = _require_owner(owner_id)
    task = await _owned_task(db, task_id, owner_id)
    current = task.status or STATUS_PENDING
    task.status = STATUS_PENDING if current == STATUS_COMPLETED else STATUS_COMPLETED
    await _commit(db, "update")
    return task.status


async def delete_task(db: AsyncSession, task_id: str, owner_id: str | None) -> None:
    owner_id = _require_owner(owner_id)
    task = await _owned_task(db, task_id, owner_id)
    await db.delete(task)
    await _commit(db, "delete")
    logger.info("Deleted task %s", task_id)


async def reorder_tasks(db: AsyncSession, owner_id: str | None, ordered_ids: object) -> None:
    """Rewrite ranks to 1..N following ``ordered_ids``.

    All ids are resolved and ownership-checked before anything is written, and
    the new ranks are committed in a single transaction. Tasks not named keep
    their current rank.
    """
    owner_id = _require_owner(owner_id)
    if (
        not isinstance(ordered_ids, list)
        or not ordered_ids
        or not all(isinstance(i, str) for i in ordered_ids)
    ):
        raise ValidationError("orderedIds must be a non-empty array")

    result = await _execute(db, select(Task).where(Task.id.in_(set(ordered_ids))))
    by_id = {task.id: task for task in result.scalars().all()}
    for task_id in ordered_ids:
        task = by_id.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.owner_id != owner_id:
            raise ForbiddenError("Forbidden")

    for rank, task_id in enumerate(ordered_ids, start=1):
        by_id[task_id].order = rank
    await _commit(db, "reorder")
    logger.info("Reordered %d tasks for owner %s", len(ordered_ids), owner_id)


async def sync_import(
    db: AsyncSession,
    owner_id: str | None,
    items: Sequence[OfflineTaskInput] | None,
) -> list[str]:
    """Create one task per offline entry in a single transaction.

    Returns the new ids in input order.
    """
    owner_id = _require_owner(owner_id)
    if not items:
        raise ValidationError("tasks must be a non-empty array")

    created: list[Task] = []
    for item in items:
        created.append(Task(
            owner_id=owner_id,
            text=_clean_text(item.text),
            status=STATUS_PENDING,
            deadline=item.deadline or "",
            category=item.category or settings.default_category,
            order=_coerce_order(item.order),
            created_at=_server_timestamp(),
            created_at_client=(
                item.created_at_client
                if item.created_at_client and _fits_bigint(item.created_at_client)
                else _now_ms()
            ),
        ))

    db.add_all(created)
    await _commit(db, "sync")
    logger.info("Imported %d offline tasks for owner %s", len(created), owner_id)
    return [task.id for task in created]
