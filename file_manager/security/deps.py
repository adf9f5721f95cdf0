# file_manager/security/deps.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .jwt import verify_jwt

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    sub: str
    role: str
    raw: Dict[str, Any]


async def auth_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RequestContext:
    if creds is None or creds.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    try:
        payload = verify_jwt(creds.credentials)
    except Exception as e:
        # ExpiredSignatureError etc.
        raise HTTPException(status_code=401, detail=f"Invalid token: {type(e).__name__}")
    return RequestContext(
        sub=payload.get("sub", "guest"),
        role=payload.get("role", "user"),
        raw=payload,
    )


async def admin_guard(ctx: RequestContext = Depends(auth_user)) -> RequestContext:
    if ctx.role != "admin":
        raise HTTPException(status_code=403, detail="Admin only")
    return ctx
