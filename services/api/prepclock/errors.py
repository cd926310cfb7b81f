"""Error types surfaced to API clients.

Services raise these; the handlers registered in ``main`` render them as
``{"error": message, **extra}`` with the matching status code.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import HTTPException

logger = logging.getLogger("prepclock.errors")


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, *, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class Unauthorized(ApiError):
    status_code = 401


class ValidationFailed(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    # Clients already treat a double start as a bad request
    status_code = 400


class InternalError(ApiError):
    status_code = 500


@contextmanager
def failure_message(action: str) -> Iterator[None]:
    """Convert unexpected failures into a generic ``Failed to <action>`` error.

    ApiErrors pass through untouched. Anything else is logged with its
    traceback and replaced so storage details never reach the client.
    """
    try:
        yield
    except (ApiError, HTTPException):
        raise
    except Exception as e:
        logger.exception(f"Failed to {action}")
        raise InternalError(f"Failed to {action}") from e


def require_text(value: Optional[str], message: str) -> str:
    """Trim ``value`` and reject it if nothing is left."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationFailed(message)
    return cleaned
