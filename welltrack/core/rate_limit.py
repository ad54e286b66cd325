"""Request rate limiting.

Authentication endpoints are limited per client IP; every other mutating
endpoint is limited per authenticated user, falling back to the client IP
when the request carries no valid access token.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from welltrack.config import settings
from welltrack.core.security import decode_access_token


def user_or_ip_key(request: Request) -> str:
    """Rate-limit key: ``user:<id>`` for a valid bearer token, else the client IP."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        payload = decode_access_token(token)
        if payload and payload.get("sub"):
            return f"user:{payload['sub']}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=user_or_ip_key,
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)

# Each policy is one counter shared by every route it decorates
auth_limit = limiter.shared_limit(
    settings.auth_rate_limit, scope="auth", key_func=get_remote_address
)
write_limit = limiter.shared_limit(settings.write_rate_limit, scope="write")
