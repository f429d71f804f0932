"""Cestas Auth - JWT access tokens.

This module implements:
- Issuing short-lived JWTs (HS256 by default) after a manual login
- A FastAPI dependency to authenticate requests using these tokens
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from cestas.auth.schemas import User
from cestas.config import Settings, get_settings
from cestas.exceptions import UnauthorizedException

security = HTTPBearer(auto_error=False)


def create_access_token(
    *,
    settings: Settings,
    user: User,
    now: datetime | None = None,
) -> tuple[str, int]:
    """Create a signed access token and return (token, expires_in_seconds)."""

    if now is None:
        now = datetime.now(timezone.utc)

    ttl_s = int(settings.auth_access_token_ttl_seconds)
    exp = now + timedelta(seconds=ttl_s)

    payload: dict[str, Any] = {
        "sub": user.id,
        "username": user.username,
        "name": user.display_name,
        "login": user.login_type,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "typ": "access",
        "iss": "cestas",
    }

    token = jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)
    return token, ttl_s


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.auth_jwt_secret, algorithms=[settings.auth_jwt_algorithm])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {e}")

    if payload.get("typ") != "access":
        raise UnauthorizedException("Invalid token type")

    return payload


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Authenticate using an access token issued by /auth/login."""

    if not credentials:
        raise UnauthorizedException("Missing authentication token")

    token = (credentials.credentials or "").strip()
    if not token or any(ch.isspace() for ch in token):
        raise UnauthorizedException("Invalid authentication token")

    payload = decode_access_token(token, settings)

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise UnauthorizedException("Malformed token payload")

    user = User(
        id=sub,
        username=str(payload.get("username") or ""),
        display_name=payload.get("name"),
        login_type=str(payload.get("login") or "manual"),
    )

    request.state.user = user.model_dump()
    return user
