# wavy/services/auth.py

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import TokenWorkflowError
from ..models import PasswordResetToken, Profile, User, UserRole
from ..security.deps import AuthUser
from ..security.passwords import hash_password, verify_password
from .tokens import expires_in, is_expired, new_token, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Identifiants invalides"


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()


def load_user_roles(db: Session, user_id: uuid.UUID) -> list[str]:
    """Roles in the order they were granted; the first one is the primary role."""
    return list(
        db.execute(
            select(UserRole.role).where(UserRole.user_id == user_id).order_by(UserRole.created_at, UserRole.role)
        ).scalars()
    )


def to_auth_user(db: Session, user: User) -> AuthUser:
    roles = load_user_roles(db, user.id)
    return AuthUser(id=user.id, email=user.email, role=roles[0] if roles else "user", roles=roles)


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Checks an email/password pair. Unknown email and wrong password give the
    same 401 so the response does not reveal which accounts exist.
    """
    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.encrypted_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    user.last_login_at = utcnow()
    db.commit()
    return user


def grant_role(db: Session, user_id: uuid.UUID, role: str) -> bool:
    """Adds ``role`` to the user. Returns False when it was already granted."""
    existing = db.execute(
        select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
    ).scalar_one_or_none()
    if existing is not None:
        return False
    db.add(UserRole(user_id=user_id, role=role))
    db.flush()
    return True


def create_account(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
    role: str | None = None,
) -> User:
    """
    Creates the user and its profile in the current transaction (the caller
    commits). A duplicate email is a 409.
    """
    if find_user_by_email(db, email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cet email est déjà utilisé")

    user = User(id=uuid.uuid4(), email=email.strip(), encrypted_password=hash_password(password))
    db.add(user)
    db.flush()
    db.add(Profile(id=user.id, email=user.email, full_name=full_name or ""))
    if role:
        grant_role(db, user.id, role)
    db.flush()
    logger.info(f"Account created for {user.email}")
    return user


def request_password_reset(db: Session, email: str) -> tuple[User, str] | None:
    """
    Issues (or replaces) the user's reset token. Returns None for an unknown
    email; the route answers the same way in both cases.
    """
    user = find_user_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for an unknown email")
        return None

    token = new_token()
    expires_at = expires_in(minutes=settings.RESET_TOKEN_TTL_MINUTES)
    row = db.execute(
        select(PasswordResetToken).where(PasswordResetToken.user_id == user.id)
    ).scalar_one_or_none()
    if row is None:
        db.add(PasswordResetToken(user_id=user.id, token=token, expires_at=expires_at))
    else:
        row.token = token
        row.expires_at = expires_at
    db.commit()
    return user, token


def confirm_password_reset(db: Session, token: str, password: str) -> None:
    """
    Consumes a reset token. The token row is deleted together with the
    password change, so presenting it again fails.
    """
    row = db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == token)
    ).scalar_one_or_none()
    if row is None or is_expired(row.expires_at):
        raise TokenWorkflowError("Token invalide ou expiré", "Ce lien de réinitialisation n'est plus valide.")

    user = db.get(User, row.user_id)
    if user is None:
        raise TokenWorkflowError("Token invalide ou expiré", "Ce lien de réinitialisation n'est plus valide.")

    # Claim the token first; a concurrent confirm finds nothing left to delete.
    claimed = db.execute(delete(PasswordResetToken).where(PasswordResetToken.token == token))
    if claimed.rowcount != 1:
        db.rollback()
        raise TokenWorkflowError("Token invalide ou expiré", "Ce lien de réinitialisation n'est plus valide.")

    user.encrypted_password = hash_password(password)
    db.commit()
    logger.info(f"Password reset for user {user.id}")
