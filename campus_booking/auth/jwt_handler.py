from datetime import datetime, timedelta, timezone

import jwt

from campus_booking.auth.identity import ROLES, Identity
from campus_booking.core import config


def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
    payload = {"sub": str(user_id), "role": role, "exp": expire, "iat": datetime.now(timezone.utc)}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def identity_from_token(token: str) -> Identity:
    """Decode a token into an Identity, raising ValueError for bad claims."""
    payload = decode_access_token(token)

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not str(subject).isdigit():
        raise ValueError("Invalid token subject")
    if role not in ROLES:
        raise ValueError("Invalid token role")

    return Identity(user_id=int(subject), role=role)
