"""
Outbound JWTs for sync server -> content host requests.

Each request to the host gets its own token, signed with the sync->host
secret, valid for `jwt_ttl_seconds` and limited to the scopes that request
needs (see `auth.models`).
"""

from __future__ import annotations

import time
from typing import Iterable

import jwt

from ..config import settings


JWT_ISSUER = "search-sync-server"
JWT_AUDIENCE = "content-host"


class JWTConfigurationError(RuntimeError):
    """Raised when the outbound signing secret or TTL is unusable."""


def create_sync_to_host_jwt(scopes: Iterable[str]) -> str:
    secret = settings.jwt_sync_to_host_secret.get_secret_value()
    if not secret:
        raise JWTConfigurationError("jwt_sync_to_host_secret is not configured.")
    if settings.jwt_ttl_seconds <= 0:
        raise JWTConfigurationError(
            f"jwt_ttl_seconds must be positive; got {settings.jwt_ttl_seconds}"
        )

    now = int(time.time())
    payload = {
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + settings.jwt_ttl_seconds,
        "scope": list(scopes),
    }
    return jwt.encode(payload, secret, algorithm=settings.jwt_algo)
