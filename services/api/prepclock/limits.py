from slowapi import Limiter
from slowapi.util import get_remote_address

from .settings import settings

# Shared across routers so one switch (settings / tests) controls all limits
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
