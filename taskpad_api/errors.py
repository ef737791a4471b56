"""Task service error taxonomy and its HTTP rendering."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class TaskServiceError(Exception):
    """Base exception for task service failures."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TaskServiceError):
    """Malformed or missing input."""

    status_code = 400


class ForbiddenError(TaskServiceError):
    """Caller identity does not own the task."""

    status_code = 403


class NotFoundError(TaskServiceError):
    """No task with the given id."""

    status_code = 404


class StoreError(TaskServiceError):
    """Backing store read or write failed."""

    status_code = 500


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskServiceError)
    async def _task_error(request: Request, exc: TaskServiceError):
        return _failure(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{where}: {first.get('msg', 'invalid')}" if where else first.get("msg", "invalid")
        else:
            message = "Invalid request"
        return _failure(400, message)
