"""Taskpad API client - async wrapper around the task service."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class TaskpadError(Exception):
    """Base exception for task API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class TaskpadValidationError(TaskpadError):
    """Request rejected as malformed (400)."""

    pass


class TaskpadForbiddenError(TaskpadError):
    """Task belongs to another user (403)."""

    pass


class TaskpadNotFoundError(TaskpadError):
    """Unknown task id (404)."""

    pass


class TaskpadConnectionError(TaskpadError):
    """The service could not be reached."""

    pass


_STATUS_ERRORS: dict[int, type[TaskpadError]] = {
    400: TaskpadValidationError,
    403: TaskpadForbiddenError,
    404: TaskpadNotFoundError,
}


class TaskpadClient:
    """Task service client.

    Usage:
        async with TaskpadClient(owner_id="uid-123") as client:
            task_id = await client.create_task("Buy milk")
            tasks = await client.list_tasks()
    """

    def __init__(
        self,
        owner_id: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.owner_id = owner_id or settings.owner_id
        self.base_url = base_url or settings.api_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    def _owner(self, owner_id: str | None) -> str:
        owner = owner_id or self.owner_id
        if not owner:
            raise TaskpadValidationError("No owner id configured. Sign in or set TASKPAD_OWNER_ID")
        return owner

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Make an API request and map failures onto TaskpadError."""
        try:
            response = await self._client.request(method=method, url=path, params=params, json=json)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TaskpadConnectionError(f"Could not reach task API: {e}") from e

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.is_error or body.get("success") is False:
            message = body.get("message") or f"HTTP {response.status_code}"
            error_cls = _STATUS_ERRORS.get(response.status_code, TaskpadError)
            raise error_cls(message, response.status_code, body)

        return body

    async def list_tasks(self, owner_id: str | None = None) -> list[dict[str, Any]]:
        """All tasks of the owner, newest first."""
        data = await self._request("GET", "/api/tasks", params={"ownerId": self._owner(owner_id)})
        return data.get("tasks", [])

    async def create_task(
        self,
        text: str,
        deadline: str = "",
        category: str | None = None,
        order: int | None = None,
        owner_id: str | None = None,
    ) -> str:
        """Create a task and return its id."""
        payload: dict[str, Any] = {"text": text, "deadline": deadline, "ownerId": self._owner(owner_id)}
        if category:
            payload["category"] = category
        if order is not None:
            payload["order"] = order
        data = await self._request("POST", "/api/tasks", json=payload)
        return data["id"]

    async def toggle_task(self, task_id: str, owner_id: str | None = None) -> str:
        """Flip pending/completed and return the new status."""
        data = await self._request(
            "PATCH", f"/api/tasks/{task_id}/toggle", params={"ownerId": self._owner(owner_id)}
        )
        return data["status"]

    async def delete_task(self, task_id: str, owner_id: str | None = None) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}", params={"ownerId": self._owner(owner_id)})

    async def reorder_tasks(self, ordered_ids: Sequence[str], owner_id: str | None = None) -> None:
        await self._request(
            "PATCH",
            "/api/tasks/reorder",
            params={"ownerId": self._owner(owner_id)},
            json={"orderedIds": list(ordered_ids)},
        )

    async def sync_tasks(
        self, tasks: Sequence[dict[str, Any]], owner_id: str | None = None
    ) -> list[str]:
        """Bulk-create offline tasks; returns new ids in input order."""
        payload = [
            {k: t[k] for k in ("text", "deadline", "category", "order", "createdAtClient") if k in t}
            for t in tasks
        ]
        data = await self._request(
            "POST",
            "/api/tasks/sync",
            params={"ownerId": self._owner(owner_id)},
            json={"tasks": payload},
        )
        return data.get("createdIds", [])
