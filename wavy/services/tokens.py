# wavy/services/tokens.py
#
# Helpers shared by the four single-use token flows (OTP, password reset,
# invitation, CRA client validation) and the periodic purge.

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from ..models import CraReport, OtpCode, PasswordResetToken, UserInvitation

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands timestamps back without tzinfo; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def expires_in(**delta) -> datetime:
    return utcnow() + timedelta(**delta)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    if expires_at is None:
        return True
    return as_utc(expires_at) <= (now or utcnow())


def new_token() -> str:
    """Opaque, URL-safe token for links sent by email."""
    return uuid.uuid4().hex


def new_long_token() -> str:
    """Longer token for links that stay valid for weeks."""
    return f"{uuid.uuid4()}-{uuid.uuid4()}"


def new_otp_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def purge_expired_tokens(db: Session) -> dict[str, int]:
    """
    Remove or retire every token whose validity window has passed.

    Returns how many rows each flow touched.
    """
    now = utcnow()

    otp = db.execute(delete(OtpCode).where(OtpCode.expires_at < now))
    resets = db.execute(delete(PasswordResetToken).where(PasswordResetToken.expires_at < now))
    invitations = db.execute(
        update(UserInvitation)
        .where(UserInvitation.status == "pending", UserInvitation.expires_at < now)
        .values(status="expired")
    )
    cra = db.execute(
        update(CraReport)
        .where(CraReport.validation_token.is_not(None), CraReport.token_expires_at < now)
        .values(validation_token=None)
    )
    db.commit()

    counts = {
        "otp_codes": otp.rowcount,
        "password_reset_tokens": resets.rowcount,
        "user_invitations": invitations.rowcount,
        "cra_validation_tokens": cra.rowcount,
    }
    logger.info(f"Purged expired tokens: {counts}")
    return counts
