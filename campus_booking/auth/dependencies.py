from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_booking.auth import jwt_handler
from campus_booking.auth.identity import Identity
from campus_booking.core.errors import AuthRequired

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise AuthRequired()

    try:
        return jwt_handler.identity_from_token(credentials.credentials)
    except Exception as exc:
        raise AuthRequired("Token is not valid.") from exc
