# wavy/services/otp.py
#
# Second login factor: a 6-digit code emailed to the user. Once verified the
# code row is kept as a "remembered device" marker for OTP_REMEMBER_DAYS.

import logging
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import TokenWorkflowError
from ..models import OtpCode, User
from .email_templates import otp_email
from .mailer import send_email_safely
from .tokens import expires_in, is_expired, new_otp_code, utcnow

logger = logging.getLogger(__name__)


def send_otp(db: Session, user: User) -> str:
    """Replaces any pending code with a fresh one and emails it to the user's address."""
    db.execute(delete(OtpCode).where(OtpCode.user_id == user.id, OtpCode.used.is_(False)))
    code = new_otp_code()
    db.add(OtpCode(user_id=user.id, code=code, used=False, expires_at=expires_in(minutes=settings.OTP_TTL_MINUTES)))
    db.commit()

    subject, html = otp_email(code, settings.COMPANY_NAME, settings.OTP_TTL_MINUTES)
    send_email_safely(user.email, subject, html)
    return code


def check_otp(db: Session, user_id: uuid.UUID, code: str) -> None:
    """
    Consumes a code. Raises TokenWorkflowError when the code is unknown,
    expired or already used.
    """
    otp = db.execute(
        select(OtpCode).where(
            OtpCode.user_id == user_id,
            OtpCode.code == code.strip(),
            OtpCode.used.is_(False),
        )
    ).scalars().first()
    if otp is None or is_expired(otp.expires_at):
        raise TokenWorkflowError("Code invalide ou expiré", "Le code saisi est invalide ou a expiré.", valid=False)

    # Guarded flip so two concurrent verifies cannot both succeed
    claimed = db.execute(
        update(OtpCode)
        .where(OtpCode.id == otp.id, OtpCode.used.is_(False))
        .values(used=True, expires_at=expires_in(days=settings.OTP_REMEMBER_DAYS))
    )
    if claimed.rowcount != 1:
        db.rollback()
        raise TokenWorkflowError("Code invalide ou expiré", "Le code saisi est invalide ou a expiré.", valid=False)

    db.execute(
        delete(OtpCode).where(
            OtpCode.user_id == user_id,
            OtpCode.expires_at < utcnow(),
            OtpCode.id != otp.id,
        )
    )
    db.commit()
    logger.info(f"OTP verified for user {user_id}")


def is_already_verified(db: Session, user_id: uuid.UUID) -> bool:
    rows = db.execute(
        select(OtpCode.expires_at).where(OtpCode.user_id == user_id, OtpCode.used.is_(True))
    ).scalars()
    return any(not is_expired(expires_at) for expires_at in rows)
