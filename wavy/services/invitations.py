# wavy/services/invitations.py

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import TokenWorkflowError
from ..models import User, UserInvitation
from ..security.deps import USER_CRA
from .auth import create_account, grant_role
from .email_templates import invitation_email
from .mailer import send_email_safely
from .tokens import expires_in, is_expired, new_token, utcnow

logger = logging.getLogger(__name__)

INVITATION_NOT_FOUND = "Invitation invalide ou expirée"


def invitation_url(token: str) -> str:
    return f"{settings.FRONTEND_BASE_URL}/cra/auth?token={token}"


def create_invitation(
    db: Session,
    *,
    email: str,
    first_name: str | None,
    last_name: str | None,
    invited_by: uuid.UUID,
) -> UserInvitation:
    """
    Stores a pending invitation valid INVITATION_TTL_DAYS and emails the
    signup link once the row is committed.
    """
    invitation = UserInvitation(
        email=email,
        first_name=first_name,
        last_name=last_name,
        token=new_token(),
        status="pending",
        expires_at=expires_in(days=settings.INVITATION_TTL_DAYS),
        invited_by=invited_by,
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    subject, html = invitation_email(
        invitation_url(invitation.token), first_name, settings.COMPANY_NAME, settings.INVITATION_TTL_DAYS
    )
    send_email_safely(email, subject, html)
    logger.info(f"Invitation {invitation.id} sent to {email}")
    return invitation


def list_invitations(db: Session) -> list[UserInvitation]:
    return list(db.execute(select(UserInvitation).order_by(UserInvitation.created_at.desc())).scalars())


def get_pending_invitation(db: Session, token: str) -> UserInvitation:
    invitation = db.execute(
        select(UserInvitation).where(UserInvitation.token == token, UserInvitation.status == "pending")
    ).scalar_one_or_none()
    if invitation is None or is_expired(invitation.expires_at):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=INVITATION_NOT_FOUND)
    return invitation


def accept_invitation(db: Session, *, token: str, password: str, full_name: str | None = None) -> User:
    """
    Turns a pending invitation into an account with the ``user_cra`` role.

    The status flip is a guarded UPDATE so only one accept can win; any later
    attempt sees the invitation as already processed.
    """
    invitation = db.execute(
        select(UserInvitation).where(UserInvitation.token == token)
    ).scalar_one_or_none()
    if invitation is None:
        raise TokenWorkflowError(INVITATION_NOT_FOUND, "Ce lien d'invitation n'est plus valide.")
    if invitation.status == "expired":
        raise TokenWorkflowError("Token expiré", "Cette invitation a expiré.")
    if invitation.status != "pending":
        raise TokenWorkflowError("Déjà traité", "Cette invitation a déjà été utilisée.", status=invitation.status)
    if is_expired(invitation.expires_at):
        invitation.status = "expired"
        db.commit()
        raise TokenWorkflowError("Token expiré", "Cette invitation a expiré.")

    claimed = db.execute(
        update(UserInvitation)
        .where(UserInvitation.id == invitation.id, UserInvitation.status == "pending")
        .values(status="accepted", accepted_at=utcnow())
    )
    if claimed.rowcount != 1:
        db.rollback()
        raise TokenWorkflowError("Déjà traité", "Cette invitation a déjà été utilisée.")

    if not full_name:
        full_name = " ".join(part for part in (invitation.first_name, invitation.last_name) if part)

    try:
        user = create_account(db, email=invitation.email, password=password, full_name=full_name)
        grant_role(db, user.id, USER_CRA)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Invitation {invitation.id} accepted, user {user.id} created")
    return user
