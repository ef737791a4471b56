"""Offline task buffer and sync."""

from .queue import EntryState, OfflineQueue, SyncReport
from .storage import OfflineStorageError, OfflineStore

__all__ = ["EntryState", "OfflineQueue", "OfflineStorageError", "OfflineStore", "SyncReport"]
