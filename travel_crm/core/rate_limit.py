from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-client-IP limits; applied to write endpoints with ``@limiter.limit``
limiter = Limiter(key_func=get_remote_address)

WRITE_RATE_LIMIT = "60/minute"
