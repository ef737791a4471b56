"""Offline queue: buffer creations locally and replay them on reconnect.

Each buffered entry is ``queued`` until a sync call that included it succeeds,
at which point it is removed from the buffer (``synced``). A failed sync leaves
every entry queued; nothing is retried until the next reconnect or app start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..api.client import TaskpadClient, TaskpadError
from .storage import OfflineStorageError, OfflineStore

logger = logging.getLogger(__name__)


class EntryState(str, Enum):
    QUEUED = "queued"
    SYNCED = "synced"


@dataclass
class SyncReport:
    """Outcome of one drain-and-sync pass."""

    attempted: int = 0
    created_ids: list[str] = field(default_factory=list)
    states: dict[int, EntryState] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def synced(self) -> int:
        return sum(1 for s in self.states.values() if s is EntryState.SYNCED)

    @property
    def id_map(self) -> dict[int, str]:
        """Local key -> server id for every synced entry."""
        synced = [k for k, s in self.states.items() if s is EntryState.SYNCED]
        return dict(zip(synced, self.created_ids))


class OfflineQueue:
    def __init__(self, store: OfflineStore, client: TaskpadClient):
        self.store = store
        self.client = client

    def enqueue(self, task: dict[str, Any]) -> int:
        """Buffer a task locally. Never touches the network."""
        return self.store.put(task)

    def pending(self) -> list[dict[str, Any]]:
        return self.store.all()

    def set_orders(self, orders: dict[int, int]) -> None:
        """Record new manual ranks for buffered entries, keyed by local id."""
        for local_id, order in orders.items():
            self.store.update(local_id, order=order)

    async def drain_and_sync(self, owner_id: str | None = None) -> SyncReport:
        """Replay the whole buffer with one sync call.

        Entries are evicted only after the service confirms the batch; on any
        failure the buffer is left exactly as it was.
        """
        try:
            entries = self.store.all()
        except OfflineStorageError as e:
            logger.warning("Offline sync skipped: %s", e)
            return SyncReport(error=str(e))

        if not entries:
            return SyncReport()

        local_ids = [entry["localId"] for entry in entries]
        report = SyncReport(
            attempted=len(entries),
            states={local_id: EntryState.QUEUED for local_id in local_ids},
        )

        try:
            report.created_ids = await self.client.sync_tasks(entries, owner_id=owner_id)
        except TaskpadError as e:
            logger.warning("Offline sync of %d tasks failed: %s", len(entries), e.message)
            report.error = e.message
            return report

        try:
            self.store.remove_many(local_ids)
        except OfflineStorageError as e:
            logger.exception("Offline tasks synced but the local buffer could not be cleared")
            report.error = str(e)
            return report

        report.states = {local_id: EntryState.SYNCED for local_id in local_ids}
        logger.info("Synced %d offline tasks", len(entries))
        return report
