"""
Application error taxonomy.

Every error raised out of a service carries the HTTP status and the
client-facing message. Rendering happens in one place (main.py), so
services never build responses themselves.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(AppError):
    status_code = 401


class ValidationError(AppError):
    status_code = 400


class NotFound(AppError):
    status_code = 404


class UpstreamFailure(AppError):
    """A GitHub call failed. The message is generic; detail goes to the log."""
    status_code = 500


class DeleteConflict(UpstreamFailure):
    """The file changed or disappeared between reading its SHA and deleting it."""


class AuthExchangeError(AppError):
    status_code = 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
