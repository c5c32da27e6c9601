"""
Bearer-token capability check.

The service does not manage accounts. A trusted issuer signs HS256 JWTs with
``sub`` (user id) and ``is_admin``; we verify the signature and expiry and turn
the claims into a Principal. Nothing here touches the database.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from seat_reservation.core.config import get_settings
from seat_reservation.core.exceptions import Unauthorized
from seat_reservation.core.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token. Used by trusted tooling and tests, not exposed over HTTP."""
    settings = get_settings()
    to_encode = dict(data)
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Principal:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")
    return Principal(user_id=str(user_id), is_admin=bool(payload.get("is_admin", False)))


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """FastAPI dependency: resolve the caller from the Authorization header."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized()
    principal = decode_access_token(credentials.credentials)
    logger.debug("principal_resolved", user_id=principal.user_id, is_admin=principal.is_admin)
    return principal
