"""Durable local buffer for tasks created while offline.

Entries live in a single JSON file keyed by ``localId`` (the client creation
timestamp in milliseconds). The file is replaced atomically on every write and
kept at 0o600 since it holds the user's task text.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)

STORAGE_VERSION = 1


class OfflineStorageError(Exception):
    """The local buffer could not be read or written."""


class OfflineStore:
    """Offline task buffer backed by a JSON file.

    Usage:
        store = OfflineStore()
        local_id = store.put({"text": "Buy milk", "category": "Shopping"})
        for entry in store.all():
            ...
        store.remove(local_id)
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else settings.offline_path

    def _load(self) -> dict[str, dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise OfflineStorageError(f"Could not read offline buffer {self.path}: {e}") from e
        entries = data.get("entries", {}) if isinstance(data, dict) else {}
        return entries if isinstance(entries, dict) else {}

    def _save(self, entries: dict[str, dict[str, Any]]) -> None:
        content = json.dumps({"version": STORAGE_VERSION, "entries": entries}, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".offline-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise OfflineStorageError(f"Could not write offline buffer {self.path}: {e}") from e

    def put(self, task: dict[str, Any]) -> int:
        """Persist a task and return its local key.

        The key starts from the task's ``createdAtClient`` (or the current time
        in milliseconds when absent) and is bumped past any key already in use,
        so entries created within the same millisecond never overwrite each
        other. ``createdAtClient`` itself is kept as given.
        """
        entries = self._load()
        created_at_client = task.get("createdAtClient") or int(time.time() * 1000)
        local_id = created_at_client
        while str(local_id) in entries:
            local_id += 1
        entry = {**task, "createdAtClient": created_at_client, "localId": local_id}
        entries[str(local_id)] = entry
        self._save(entries)
        logger.debug("Buffered offline task %s", local_id)
        return local_id

    def update(self, local_id: int, **fields: Any) -> bool:
        """Merge ``fields`` into a buffered entry; False if it is gone."""
        entries = self._load()
        entry = entries.get(str(local_id))
        if entry is None:
            return False
        entry.update(fields)
        self._save(entries)
        return True

    def all(self) -> list[dict[str, Any]]:
        """All buffered entries, oldest first."""
        entries = self._load()
        return [entries[k] for k in sorted(entries, key=lambda k: entries[k].get("localId", 0))]

    def get(self, local_id: int) -> dict[str, Any] | None:
        return self._load().get(str(local_id))

    def remove(self, local_id: int) -> bool:
        entries = self._load()
        if entries.pop(str(local_id), None) is None:
            return False
        self._save(entries)
        return True

    def remove_many(self, local_ids: list[int]) -> int:
        """Remove several entries with a single write; returns how many existed."""
        entries = self._load()
        removed = sum(1 for i in local_ids if entries.pop(str(i), None) is not None)
        if removed:
            self._save(entries)
        return removed

    def clear(self) -> None:
        self._save({})

    def __len__(self) -> int:
        return len(self._load())

    def __contains__(self, local_id: object) -> bool:
        return str(local_id) in self._load()
