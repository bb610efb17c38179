"""Rate limiter configuration for auth endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Rate limiter instance - shared across modules
limiter = Limiter(key_func=get_remote_address)

# Per-client limits for the credential endpoints
LOGIN_LIMIT = "5/minute"
REGISTER_LIMIT = "3/minute"
EMAIL_DISPATCH_LIMIT = "3 per 5 minutes"
