# wavy/routers/otp.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models import User
from ..schemas.auth import OtpSendRequest, OtpVerifyRequest
from ..services import otp as otp_service

router = APIRouter(prefix="/otp", tags=["OTP"])


@router.post("/send")
def send_code(payload: OtpSendRequest, db: Session = Depends(get_db)):
    user = db.get(User, payload.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur introuvable")
    otp_service.send_otp(db, user)
    return {"success": True}


@router.post("/verify")
def verify_code(payload: OtpVerifyRequest, db: Session = Depends(get_db)):
    if payload.check_only:
        return {"alreadyVerified": otp_service.is_already_verified(db, payload.user_id)}

    if not payload.code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="code requis")

    otp_service.check_otp(db, payload.user_id, payload.code)
    return {"valid": True, "message": "Code vérifié avec succès"}
