# wavy/security/jwt.py

import jwt
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException, status

from ..config import settings


def issue_jwt(sub: str, email: str, roles: list[str]) -> str:
    """
    Creates a new bearer token for a user session.

    ``role`` is kept next to ``roles`` because older clients read the primary role only.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES),
        "sub": sub,
        "email": email,
        "role": roles[0] if roles else "user",
        "roles": roles,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_jwt(token: str) -> dict:
    """
    Verifies a JWT and returns its payload.
    Raises HTTPException if the token is invalid.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide ou expiré")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide ou expiré")
