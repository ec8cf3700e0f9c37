"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. The write limit string comes from
settings (WRITE_RATE_LIMIT) and is read when a request is checked.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from fireeats.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

POPULATE_LIMIT = "10/minute"


def _write_limit() -> str:
    return get_settings().write_rate_limit


limit_writes = limiter.limit(_write_limit)
limit_populate = limiter.limit(POPULATE_LIMIT)
