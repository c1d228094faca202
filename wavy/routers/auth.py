# wavy/routers/auth.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..db.session import get_db
from ..models import User
from ..schemas.auth import (
    AuthUserOut,
    LoginRequest,
    LoginResponse,
    ResetPasswordConfirm,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
)
from ..security.deps import AuthUser, require_user
from ..security.jwt import issue_jwt
from ..services import auth as auth_service
from ..services.email_templates import password_reset_email
from ..services.mailer import send_email_safely
from ..services.otp import is_already_verified

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchanges email and password for a bearer token. ``otpRequired`` tells the
    frontend to run the emailed-code step before opening the session.
    """
    user = auth_service.authenticate(db, payload.email, payload.password)
    auth_user = auth_service.to_auth_user(db, user)
    token = issue_jwt(sub=str(user.id), email=user.email, roles=auth_user.roles)

    otp_required = settings.OTP_LOGIN_ENABLED and not is_already_verified(db, user.id)
    logger.info(f"User {user.email} logged in")
    return LoginResponse(token=token, user=AuthUserOut(**auth_user.model_dump()), otpRequired=otp_required)


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    full_name = payload.metadata.get("full_name") or ""
    user = auth_service.create_account(db, email=payload.email, password=payload.password, full_name=full_name)
    db.commit()
    auth_user = auth_service.to_auth_user(db, user)
    return SignupResponse(user=AuthUserOut(**auth_user.model_dump()))


@router.post("/logout")
def logout():
    # Tokens are stateless; the client simply drops its copy.
    return {"success": True}


@router.get("/me", response_model=AuthUserOut)
def me(current_user: AuthUser = Depends(require_user), db: Session = Depends(get_db)):
    user = db.get(User, current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur introuvable")
    return AuthUserOut(**auth_service.to_auth_user(db, user).model_dump())


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Always answers success so the endpoint cannot be used to probe accounts."""
    issued = auth_service.request_password_reset(db, payload.email)
    if issued is not None:
        user, token = issued
        subject, html = password_reset_email(
            f"{settings.FRONTEND_BASE_URL}/auth?reset={token}", settings.COMPANY_NAME
        )
        send_email_safely(user.email, subject, html)
    return {"success": True}


@router.post("/reset-password-confirm")
def reset_password_confirm(payload: ResetPasswordConfirm, db: Session = Depends(get_db)):
    auth_service.confirm_password_reset(db, payload.token, payload.password)
    return {"success": True}
