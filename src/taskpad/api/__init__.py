"""Task API client module.

Usage:
    from taskpad.api import TaskpadClient

    async with TaskpadClient(owner_id="uid-123") as client:
        tasks = await client.list_tasks()
"""

from .client import (
    TaskpadClient,
    TaskpadConnectionError,
    TaskpadError,
    TaskpadForbiddenError,
    TaskpadNotFoundError,
    TaskpadValidationError,
)

__all__ = [
    "TaskpadClient",
    "TaskpadConnectionError",
    "TaskpadError",
    "TaskpadForbiddenError",
    "TaskpadNotFoundError",
    "TaskpadValidationError",
]
