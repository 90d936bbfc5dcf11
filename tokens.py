# tokens.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel, ValidationError

from config import settings


class Claims(BaseModel):
    sub: str
    exp: int
    iat: int = 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_jwt(sub: str, expires_minutes: Optional[int] = None) -> str:
    minutes = settings.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    issued = _now()
    payload = {
        "sub": sub,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> Claims:
    """Verify signature and shape. Expiry is left to is_jwt_expired()."""
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_exp": False, "require": ["sub", "exp"]},
    )
    try:
        return Claims(**payload)
    except ValidationError as e:
        raise jwt.InvalidTokenError(f"Malformed claims: {e}") from e


def is_jwt_expired(exp: int) -> bool:
    return exp < int(_now().timestamp())
