"""
Inbound JWT verification.

The content host signs a short-lived HS token per request with the
host->sync secret. A valid token carries `iss=content-host`,
`aud=search-sync-server`, `iat`, `exp` and a `scope` claim (a list, or a
space-separated string). Routes declare the scope they need through
`require_scopes`; the verified caller is injected as a `HostCaller`.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, FrozenSet

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings
from .models import SCOPE_INDEX_ADMIN, SCOPE_INDEX_WRITE, HostCaller


JWT_ISSUER = "content-host"
JWT_AUDIENCE = "search-sync-server"

REQUIRED_CLAIMS = ["iss", "aud", "iat", "exp", "scope"]

security = HTTPBearer(auto_error=True)

# Checked in order; subclasses before their bases.
_REJECTIONS = (
    (jwt.ExpiredSignatureError, "Token has expired."),
    (jwt.InvalidSignatureError, "Invalid token signature."),
    (jwt.InvalidAudienceError, "Invalid token audience."),
    (jwt.InvalidIssuerError, "Invalid token issuer."),
    (jwt.MissingRequiredClaimError, "Token is missing a required claim."),
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _parse_scopes(raw: Any) -> FrozenSet[str]:
    if isinstance(raw, str):
        return frozenset(raw.split())
    if isinstance(raw, list) and all(isinstance(s, str) for s in raw):
        return frozenset(raw)
    raise _unauthorized("'scope' claim must be a list or a space-separated string.")


def verify_host_jwt(
    creds: HTTPAuthorizationCredentials = Depends(security),
) -> HostCaller:
    secret = settings.jwt_host_to_sync_secret.get_secret_value()
    if not secret or not settings.jwt_algo:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT verification configuration error.",
        )

    try:
        claims = jwt.decode(
            creds.credentials,
            secret,
            algorithms=[settings.jwt_algo],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.InvalidTokenError as exc:
        for error_type, detail in _REJECTIONS:
            if isinstance(exc, error_type):
                raise _unauthorized(detail)
        raise _unauthorized("Invalid or malformed token.")

    return HostCaller(
        subject=claims.get("sub") or claims.get("user") or JWT_ISSUER,
        scopes=_parse_scopes(claims["scope"]),
    )


def require_scopes(*required_scopes: str) -> Callable[..., HostCaller]:
    """
    Dependency factory: 403 unless the caller holds every scope in
    `required_scopes`.
    """
    required = frozenset(required_scopes)

    def check_scopes(caller: HostCaller = Depends(verify_host_jwt)) -> HostCaller:
        missing = caller.missing(required)
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing required scope(s): {', '.join(sorted(missing))}",
            )
        return caller

    return check_scopes


IndexAdmin = Annotated[HostCaller, Depends(require_scopes(SCOPE_INDEX_ADMIN))]
IndexWriter = Annotated[HostCaller, Depends(require_scopes(SCOPE_INDEX_WRITE))]
