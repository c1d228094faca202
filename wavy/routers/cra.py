# wavy/routers/cra.py

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..schemas.cra import (
    CraCreate,
    CraReport,
    CraUpdate,
    DayDetail,
    DayDetailIn,
    SendValidationRequest,
    ValidateRequest,
)
from ..security.deps import ADMIN, USER_CRA, AuthUser, require_roles
from ..services import cra as cra_service

router = APIRouter(prefix="/cra", tags=["CRA"])

require_cra_user = require_roles(ADMIN, USER_CRA)


@router.get("", response_model=List[CraReport])
def list_reports(db: Session = Depends(get_db), user: AuthUser = Depends(require_cra_user)):
    return cra_service.list_reports(db, user)


@router.post("", response_model=CraReport, status_code=status.HTTP_201_CREATED)
def create_report(payload: CraCreate, db: Session = Depends(get_db), user: AuthUser = Depends(require_cra_user)):
    report = cra_service.create_report(db, user, payload)
    return cra_service.get_report_row(db, user, report.id)


# Token routes are declared before "/{cra_id}" so the literal paths win.

@router.post("/send-validation")
def send_validation(
    payload: SendValidationRequest,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_cra_user),
):
    cra_service.send_validation(db, user, payload.cra_id, payload.client_email)
    return {"success": True, "message": "Email de validation envoyé"}


@router.post("/validate")
def validate(payload: ValidateRequest, db: Session = Depends(get_db)):
    """Public: the client follows the emailed link, the token is the credential."""
    return cra_service.validate_by_token(db, payload.token, payload.action)


@router.get("/{cra_id}", response_model=CraReport)
def get_report(cra_id: uuid.UUID, db: Session = Depends(get_db), user: AuthUser = Depends(require_cra_user)):
    return cra_service.get_report_row(db, user, cra_id)


@router.put("/{cra_id}")
def update_report(
    cra_id: uuid.UUID,
    payload: CraUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_cra_user),
):
    cra_service.update_report(db, user, cra_id, payload)
    return {"success": True}


@router.put("/{cra_id}/submit")
def submit_report(cra_id: uuid.UUID, db: Session = Depends(get_db), user: AuthUser = Depends(require_roles(USER_CRA))):
    cra_service.submit_report(db, user, cra_id)
    return {"success": True}


@router.get("/{cra_id}/days", response_model=List[DayDetail])
def list_days(cra_id: uuid.UUID, db: Session = Depends(get_db), user: AuthUser = Depends(require_cra_user)):
    return cra_service.list_days(db, user, cra_id)


@router.post("/{cra_id}/days")
def replace_days(
    cra_id: uuid.UUID,
    days: List[DayDetailIn],
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_cra_user),
):
    count = cra_service.replace_days(db, user, cra_id, days)
    return {"success": True, "count": count}
