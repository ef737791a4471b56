"""Client session: ties the API, the offline queue and the state reducer together.

A ``Session`` is what a UI drives. It owns the current :class:`TaskListState`
and turns user events (add, toggle, drag, connectivity changes) into service
calls and reducer actions.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .api.client import TaskpadClient, TaskpadError
from .config import settings
from .models import DEFAULT_CATEGORY, TaskView, clean_text
from .offline.queue import OfflineQueue, SyncReport
from .offline.storage import OfflineStorageError
from .ordering import DragResult, DropKind, DropOutcome, apply_drop, drop_ranks
from .state import (
    Action,
    DragWarningExpired,
    DragWarningShown,
    ErrorCleared,
    ErrorRaised,
    FilterChanged,
    Loaded,
    LocalTaskAdded,
    Reordered,
    SignedOut,
    SortChanged,
    TaskListState,
    WarningRaised,
    reduce,
)

logger = logging.getLogger(__name__)

LOCAL_ONLY_MESSAGE = "This task is only saved on this device. It can be changed once it has synced."


def _now_ms() -> int:
    return int(time.time() * 1000)


class Session:
    def __init__(
        self,
        client: TaskpadClient,
        queue: OfflineQueue,
        owner_id: str | None = None,
        *,
        online: bool = True,
        clock: Callable[[], float] = time.monotonic,
        warning_seconds: float | None = None,
    ):
        self.client = client
        self.queue = queue
        self.owner_id = owner_id
        self.online = online
        self.clock = clock
        self.warning_seconds = (
            warning_seconds if warning_seconds is not None else settings.drag_warning_seconds
        )
        self.state = TaskListState()

    @property
    def signed_in(self) -> bool:
        return bool(self.owner_id)

    def dispatch(self, action: Action) -> TaskListState:
        self.state = reduce(self.state, action)
        return self.state

    # ---- auth ----

    async def sign_in(self, owner_id: str) -> None:
        """Start a session for ``owner_id``; replays any offline buffer first."""
        self.owner_id = owner_id
        if self.online:
            await self.sync()
        await self.refresh()

    def sign_out(self) -> None:
        self.owner_id = None
        self.dispatch(SignedOut())

    # ---- loading ----

    def _local_tasks(self) -> tuple[TaskView, ...]:
        try:
            return tuple(TaskView.from_offline(e) for e in self.queue.pending())
        except OfflineStorageError as e:
            self.dispatch(WarningRaised(f"Could not read offline tasks: {e}"))
            return ()

    async def refresh(self) -> None:
        """Reload tasks from the service (or just the offline buffer when offline)."""
        if not self.signed_in:
            return
        local = self._local_tasks()
        if not self.online:
            confirmed = tuple(t for t in self.state.tasks if not t.is_local)
            self.dispatch(Loaded(confirmed, local))
            return
        try:
            data = await self.client.list_tasks(owner_id=self.owner_id)
        except TaskpadError as e:
            logger.warning("Loading tasks failed: %s", e.message)
            self.dispatch(ErrorRaised("Could not load tasks."))
            return
        self.dispatch(Loaded(tuple(TaskView.from_api(d) for d in data), local))

    # ---- mutations ----

    def _next_order(self) -> int:
        return max((t.order for t in self.state.tasks if t.order is not None), default=0) + 1

    async def add_task(
        self,
        text: str,
        deadline: str = "",
        category: str = DEFAULT_CATEGORY,
    ) -> TaskView | None:
        """Create a task, or buffer it locally when offline."""
        if not self.signed_in:
            self.dispatch(ErrorRaised("Sign in to add tasks."))
            return None
        try:
            cleaned = clean_text(text)
        except ValueError as e:
            self.dispatch(ErrorRaised(str(e)))
            return None
        self.dispatch(ErrorCleared())
        order = self._next_order()

        if self.online:
            try:
                task_id = await self.client.create_task(
                    cleaned, deadline=deadline, category=category, order=order, owner_id=self.owner_id
                )
            except TaskpadError as e:
                logger.warning("Creating task failed: %s", e.message)
                self.dispatch(ErrorRaised("Could not create the task."))
                return None
            await self.refresh()
            return self.state.find(task_id)

        entry = {
            "text": cleaned,
            "deadline": deadline,
            "category": category,
            "order": order,
            "createdAtClient": _now_ms(),
        }
        try:
            local_id = self.queue.enqueue(entry)
        except OfflineStorageError as e:
            # The optimistic task stays visible even though it was not persisted.
            logger.warning("Buffering offline task failed: %s", e)
            local_id = entry["createdAtClient"]
            self.dispatch(WarningRaised("Saved on screen only: the task could not be stored on this device."))
        view = TaskView.from_offline({**entry, "localId": local_id})
        self.dispatch(LocalTaskAdded(view))
        return view

    async def _server_mutation(self, task_id: str, verb: str, call) -> bool:
        task = self.state.find(task_id)
        if task is None:
            self.dispatch(ErrorRaised("Task not found."))
            return False
        if task.is_local:
            self.dispatch(ErrorRaised(LOCAL_ONLY_MESSAGE))
            return False
        if not self.online:
            self.dispatch(ErrorRaised(f"You are offline: could not {verb} the task."))
            return False
        try:
            await call(task_id, owner_id=self.owner_id)
        except TaskpadError as e:
            logger.warning("Could not %s task %s: %s", verb, task_id, e.message)
            self.dispatch(ErrorRaised(f"Could not {verb} the task."))
            return False
        await self.refresh()
        return True

    async def toggle(self, task_id: str) -> bool:
        return await self._server_mutation(task_id, "update", self.client.toggle_task)

    async def remove(self, task_id: str) -> bool:
        return await self._server_mutation(task_id, "delete", self.client.delete_task)

    # ---- ordering ----

    async def drop(self, result: DragResult) -> DropOutcome:
        """Handle the end of a drag on the visible list."""
        outcome = apply_drop(self.state.visible, self.state.sort, result)

        if outcome.kind is DropKind.NO_DESTINATION:
            if outcome.task_id is not None:
                self.dispatch(DragWarningShown(outcome.task_id, self.clock() + self.warning_seconds))
            return outcome
        if outcome.kind is not DropKind.REORDERED:
            return outcome

        # Optimistic: the new order shows immediately, whatever happens next.
        self.dispatch(Reordered(tuple(outcome.ordered_ids)))
        self._store_local_order(outcome.tasks)
        if not self.online:
            self.dispatch(ErrorRaised("You are offline: the new order was not saved."))
            return outcome

        confirmed_ids = [t.id for t in outcome.tasks if not t.is_local]
        if not confirmed_ids:
            return outcome
        try:
            await self.client.reorder_tasks(confirmed_ids, owner_id=self.owner_id)
        except TaskpadError as e:
            logger.warning("Saving order failed: %s", e.message)
            self.dispatch(ErrorRaised("Could not save the new order."))
        return outcome

    def _store_local_order(self, tasks: list[TaskView]) -> None:
        ranks = drop_ranks(tasks)
        orders = {t.local_id: ranks[t.id] for t in tasks if t.is_local}
        if not orders:
            return
        try:
            self.queue.set_orders(orders)
        except OfflineStorageError as e:
            logger.warning("Storing offline task order failed: %s", e)
            self.dispatch(WarningRaised("The new position of offline tasks could not be stored on this device."))

    def expire_warnings(self, now: float | None = None) -> None:
        self.dispatch(DragWarningExpired(self.clock() if now is None else now))

    def set_filter(self, value: str) -> None:
        self.dispatch(FilterChanged(value))

    def set_sort(self, value: str) -> None:
        self.dispatch(SortChanged(value))

    # ---- connectivity ----

    async def set_online(self, online: bool) -> SyncReport | None:
        """Record connectivity; an offline -> online edge replays the buffer once."""
        was_online = self.online
        self.online = online
        if online and not was_online and self.signed_in:
            report = await self.sync()
            await self.refresh()
            return report
        return None

    async def sync(self) -> SyncReport:
        report = await self.queue.drain_and_sync(self.owner_id)
        if not report.ok:
            self.dispatch(ErrorRaised("Offline tasks could not be synced yet."))
        return report
