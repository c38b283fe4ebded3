from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings

_settings = get_settings()

# Default limit per client IP; individual routes may tighten it.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.rate_limit],
    enabled=_settings.rate_limit_enabled,
)

LOGIN_RATE_LIMIT = "10/minute"
