"""Task JSON API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import get_owner_id
from ..schemas.task import ReorderRequest, SyncTasksRequest, TaskCreate
from ..services import task_svc

router = APIRouter(prefix=f"{settings.api_prefix}/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    owner_id: str | None = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    tasks = await task_svc.list_tasks(db, owner_id)
    return {"success": True, "tasks": [t.to_dict() for t in tasks]}


@router.post("", status_code=201)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
):
    task = await task_svc.create_task(
        db,
        data.owner_id,
        data.text,
        deadline=data.deadline,
        category=data.category,
        order=data.order,
    )
    return {"success": True, "id": task.id}


# Declared before the /{task_id} routes so "reorder" and "sync" are never read as ids.
@router.patch("/reorder")
async def reorder_tasks(
    data: ReorderRequest,
    owner_id: str | None = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    await task_svc.reorder_tasks(db, owner_id, data.ordered_ids)
    return {"success": True}


@router.post("/sync", tags=["offline"])
async def sync_tasks(
    data: SyncTasksRequest,
    owner_id: str | None = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    created_ids = await task_svc.sync_import(db, owner_id, data.tasks)
    return {"success": True, "createdIds": created_ids}


@router.patch("/{task_id}/toggle")
async def toggle_task(
    task_id: str,
    owner_id: str | None = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    status = await task_svc.toggle_task(db, task_id, owner_id)
    return {"success": True, "status": status}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    owner_id: str | None = Depends(get_owner_id),
    db: AsyncSession = Depends(get_db),
):
    await task_svc.delete_task(db, task_id, owner_id)
    return {"success": True}
