# wavy/security/deps.py

import uuid

from fastapi import Depends, HTTPException, Request, status
from pydantic import BaseModel

from .jwt import verify_jwt

ADMIN = "admin"
USER_CRA = "user_cra"


class AuthUser(BaseModel):
    """Identity attached to an authenticated request, decoded from the bearer token."""
    id: uuid.UUID
    email: str
    role: str = "user"
    roles: list[str] = []

    @property
    def is_admin(self) -> bool:
        return ADMIN in self.roles

    def has_any_role(self, *roles: str) -> bool:
        return any(r in self.roles for r in roles)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header or not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):]


def _user_from_claims(claims: dict) -> AuthUser:
    try:
        roles = claims.get("roles") or [claims.get("role", "user")]
        return AuthUser(id=claims["sub"], email=claims.get("email", ""), role=claims.get("role", "user"), roles=roles)
    except (KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token invalide ou expiré")


def require_user(request: Request) -> AuthUser:
    token = _bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Non authentifié",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_claims(verify_jwt(token))


def require_roles(*roles: str):
    """
    Builds a dependency that lets the request through when the caller holds
    at least one of ``roles``.
    """
    def checker(user: AuthUser = Depends(require_user)) -> AuthUser:
        if not user.has_any_role(*roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès refusé")
        return user

    return checker


require_admin = require_roles(ADMIN)


def ensure_owner_or_admin(user: AuthUser, owner_id) -> None:
    """Admins bypass ownership; everyone else must own the resource."""
    if user.is_admin:
        return
    if owner_id is None or str(owner_id) != str(user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Accès refusé")
