"""Shared test fixtures for the Taskpad client test suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from taskpad.api.client import TaskpadClient
from taskpad.offline.queue import OfflineQueue
from taskpad.offline.storage import OfflineStore
from taskpad.session import Session

SAMPLE_OWNER_ID = "uid_alice"
OTHER_OWNER_ID = "uid_bob"
BASE_URL = "http://test"


class FakeTaskService:
    """In-memory stand-in for the task API, served through httpx.MockTransport."""

    def __init__(self):
        self.tasks: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str]] = []
        self.fail_with: int | None = None
        self._seq = 0

    def _next_id(self) -> str:
        self._seq += 1
        return f"task_{self._seq:03d}"

    def add(self, owner_id: str, text: str, **fields: Any) -> str:
        task_id = self._next_id()
        self.tasks[task_id] = {
            "id": task_id,
            "text": text,
            "status": fields.get("status", "pending"),
            "deadline": fields.get("deadline", ""),
            "category": fields.get("category", "Personal"),
            "ownerId": owner_id,
            "order": fields.get("order", 1736900000000 + self._seq),
            "createdAt": (datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=self._seq)).isoformat(),
            "_seq": self._seq,
        }
        if "createdAtClient" in fields:
            self.tasks[task_id]["createdAtClient"] = fields["createdAtClient"]
        return task_id

    def calls(self, method: str, path: str) -> int:
        return sum(1 for m, p in self.requests if m == method and p == path)

    @staticmethod
    def _fail(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"success": False, "message": message})

    def _public(self, task: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in task.items() if not k.startswith("_")}

    def _owned(self, task_id: str, owner: str | None) -> dict[str, Any] | httpx.Response:
        task = self.tasks.get(task_id)
        if task is None:
            return self._fail(404, "Task not found")
        if task["ownerId"] != owner:
            return self._fail(403, "Forbidden")
        return task

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if self.fail_with:
            return self._fail(self.fail_with, "Store failure")

        owner = request.url.params.get("ownerId")
        body = json.loads(request.content) if request.content else {}

        if request.method == "GET" and path == "/api/tasks":
            owned = [t for t in self.tasks.values() if t["ownerId"] == owner]
            owned.sort(key=lambda t: t["_seq"], reverse=True)
            return httpx.Response(200, json={"success": True, "tasks": [self._public(t) for t in owned]})

        if request.method == "POST" and path == "/api/tasks":
            text = (body.get("text") or "").strip()
            if not text or not body.get("ownerId"):
                return self._fail(400, "Invalid task")
            task_id = self.add(
                body["ownerId"], text,
                deadline=body.get("deadline", ""),
                category=body.get("category", "Personal"),
                **({"order": body["order"]} if "order" in body else {}),
            )
            return httpx.Response(201, json={"success": True, "id": task_id})

        if request.method == "PATCH" and path == "/api/tasks/reorder":
            ids = body.get("orderedIds") or []
            if not ids:
                return self._fail(400, "orderedIds must be a non-empty array")
            for task_id in ids:
                found = self._owned(task_id, owner)
                if isinstance(found, httpx.Response):
                    return found
            for rank, task_id in enumerate(ids, start=1):
                self.tasks[task_id]["order"] = rank
            return httpx.Response(200, json={"success": True})

        if request.method == "POST" and path == "/api/tasks/sync":
            items = body.get("tasks") or []
            if not items:
                return self._fail(400, "tasks must be a non-empty array")
            created = [
                self.add(
                    owner, item["text"],
                    deadline=item.get("deadline", ""),
                    category=item.get("category", "Personal"),
                    createdAtClient=item.get("createdAtClient"),
                    **({"order": item["order"]} if "order" in item else {}),
                )
                for item in items
            ]
            return httpx.Response(200, json={"success": True, "createdIds": created})

        if request.method == "PATCH" and path.endswith("/toggle"):
            found = self._owned(path.split("/")[3], owner)
            if isinstance(found, httpx.Response):
                return found
            found["status"] = "pending" if found["status"] == "completed" else "completed"
            return httpx.Response(200, json={"success": True, "status": found["status"]})

        if request.method == "DELETE" and path.startswith("/api/tasks/"):
            found = self._owned(path.split("/")[3], owner)
            if isinstance(found, httpx.Response):
                return found
            del self.tasks[found["id"]]
            return httpx.Response(200, json={"success": True})

        return self._fail(404, "Not found")


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_api() -> FakeTaskService:
    return FakeTaskService()


@pytest_asyncio.fixture
async def client(fake_api: FakeTaskService):
    async with TaskpadClient(
        owner_id=SAMPLE_OWNER_ID,
        base_url=BASE_URL,
        transport=httpx.MockTransport(fake_api.handler),
    ) as c:
        yield c


@pytest.fixture
def store(tmp_path: Path) -> OfflineStore:
    return OfflineStore(tmp_path / "offline_tasks.json")


@pytest.fixture
def queue(store: OfflineStore, client: TaskpadClient) -> OfflineQueue:
    return OfflineQueue(store, client)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session(client: TaskpadClient, queue: OfflineQueue, clock: FakeClock) -> Session:
    return Session(client, queue, SAMPLE_OWNER_ID, clock=clock, warning_seconds=10)
