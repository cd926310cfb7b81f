"""FastAPI dependencies for the PrepClock API.

Provides:
- Database session dependency (re-exported from db)
- Caller identity resolution from the identity header
"""

from fastapi import Request

from .db import get_db  # noqa: F401
from .errors import Unauthorized
from .settings import settings


def get_current_user_id(request: Request) -> str:
    """Resolve the opaque user id forwarded by the identity provider.

    Raises:
        Unauthorized if the header is missing or blank
    """
    user_id = (request.headers.get(settings.user_id_header) or "").strip()
    if not user_id:
        raise Unauthorized("Unauthorized")
    return user_id
