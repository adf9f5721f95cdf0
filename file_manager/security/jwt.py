# file_manager/security/jwt.py
from __future__ import annotations
import time
from typing import Dict, Any, Optional
import jwt  # PyJWT

from file_manager.config import settings  # use pydantic settings as source of truth


def _secret() -> str:
    if not settings.jwt_secret:
        # Fail fast instead of silently using a weak default
        raise RuntimeError("JWT_SECRET is required (set env JWT_SECRET)")
    return settings.jwt_secret


def _issuer() -> str:
    return settings.jwt_issuer or "file-manager"


def _ttl_seconds() -> int:
    """Default token TTL (seconds); 3600s when JWT_TTL_SECONDS is unset or invalid."""
    try:
        return int(settings.jwt_ttl_seconds) if settings.jwt_ttl_seconds is not None else 3600
    except Exception:
        return 3600


def issue_jwt(sub: str, role: str = "admin", ttl_seconds: Optional[int] = None) -> str:
    """Mint a signed admin-panel token.

    Args:
        sub: subject, e.g. "admin:jane@example.com".
        role: "admin" is the only role the file manager API accepts.
        ttl_seconds: optional override; non-positive or invalid values fall back to the default.
    """
    now = int(time.time())
    try:
        ttl = int(ttl_seconds) if ttl_seconds is not None else _ttl_seconds()
    except Exception:
        ttl = _ttl_seconds()
    if ttl <= 0:
        ttl = _ttl_seconds()

    payload: Dict[str, Any] = {
        "iss": _issuer(),
        "sub": sub,
        "role": role,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, _secret(), algorithm="HS256")


def verify_jwt(token: str) -> Dict[str, Any]:
    data = jwt.decode(
        token,
        _secret(),
        algorithms=["HS256"],
        options={"require": ["exp", "iat", "iss"]},
    )
    if data.get("iss") != _issuer():
        raise jwt.InvalidIssuerError("Issuer mismatch")
    return data
