# wavy/services/cra.py
#
# Monthly activity reports (CRA): ownership rules, the draft -> submitted
# lifecycle and the emailed client validation.

import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import TokenWorkflowError
from ..models import Client, CraDayDetail, CraReport, Profile
from ..schemas.cra import CraCreate, CraUpdate, DayDetailIn
from ..security.deps import AuthUser, ensure_owner_or_admin
from .email_templates import cra_approved_email, cra_validation_request_email
from .formatting import datetime_label, month_label
from .mailer import send_email_safely
from .pdf import CraPdfData, DayLine, cra_pdf_filename, generate_cra_pdf
from .tokens import expires_in, is_expired, new_long_token, utcnow

logger = logging.getLogger(__name__)

CRA_NOT_FOUND = "CRA introuvable"
OWNER_EDITABLE_FIELDS = {"client_id", "company_name", "worked_days", "absent_days", "monthly_comment"}
ACTIONS = {"approve": "approved", "reject": "rejected"}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CRA_NOT_FOUND)


def _report_select():
    return (
        select(CraReport, Client.name, Profile.email, Profile.full_name)
        .outerjoin(Client, Client.id == CraReport.client_id)
        .outerjoin(Profile, Profile.id == CraReport.user_id)
    )


def _as_row(report: CraReport, client_name, consultant_email, consultant_name) -> dict:
    row = {column.key: getattr(report, column.key) for column in CraReport.__table__.columns}
    row.pop("validation_token", None)
    row.update(client_name=client_name, consultant_email=consultant_email, consultant_name=consultant_name)
    return row


def list_reports(db: Session, user: AuthUser) -> list[dict]:
    """Admins see every report; consultants only their own."""
    stmt = _report_select().order_by(CraReport.created_at.desc())
    if not user.is_admin:
        stmt = stmt.where(CraReport.user_id == user.id)
    return [_as_row(*row) for row in db.execute(stmt).all()]


def get_report_row(db: Session, user: AuthUser, cra_id: uuid.UUID) -> dict:
    stmt = _report_select().where(CraReport.id == cra_id)
    if not user.is_admin:
        stmt = stmt.where(CraReport.user_id == user.id)
    row = db.execute(stmt).first()
    if row is None:
        raise _not_found()
    return _as_row(*row)


def get_visible_report(db: Session, user: AuthUser, cra_id: uuid.UUID) -> CraReport:
    """
    Loads a report the caller may act on. Someone else's report is reported
    as missing rather than forbidden.
    """
    report = db.get(CraReport, cra_id)
    if report is None or (not user.is_admin and report.user_id != user.id):
        raise _not_found()
    return report


def create_report(db: Session, user: AuthUser, payload: CraCreate) -> CraReport:
    client_filter = (
        CraReport.client_id.is_(None) if payload.client_id is None else CraReport.client_id == payload.client_id
    )
    existing = db.execute(
        select(CraReport.id).where(CraReport.user_id == user.id, CraReport.month == payload.month, client_filter)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Un CRA existe déjà pour ce mois")

    report = CraReport(user_id=user.id, status="draft", **payload.model_dump())
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"CRA {report.id} created for {user.email} ({report.month})")
    return report


def update_report(db: Session, user: AuthUser, cra_id: uuid.UUID, payload: CraUpdate) -> None:
    """
    Admins may change any field, status included. Owners may edit the
    descriptive fields while the report is still a draft; the draft check and
    the write happen in the same UPDATE.
    """
    values = payload.model_dump(exclude_unset=True)

    if user.is_admin:
        report = db.get(CraReport, cra_id)
        if report is None:
            raise _not_found()
        for key, value in values.items():
            setattr(report, key, value)
        db.commit()
        return

    values = {key: value for key, value in values.items() if key in OWNER_EDITABLE_FIELDS}
    report = get_visible_report(db, user, cra_id)
    if not values:
        return
    result = db.execute(
        update(CraReport)
        .where(CraReport.id == report.id, CraReport.user_id == user.id, CraReport.status == "draft")
        .values(**values)
    )
    if result.rowcount != 1:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Ce CRA n'est plus modifiable")
    db.commit()


def submit_report(db: Session, user: AuthUser, cra_id: uuid.UUID) -> None:
    report = get_visible_report(db, user, cra_id)
    result = db.execute(
        update(CraReport)
        .where(CraReport.id == report.id, CraReport.user_id == user.id, CraReport.status == "draft")
        .values(status="submitted")
    )
    if result.rowcount != 1:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Seul un CRA en brouillon peut être soumis")
    db.commit()
    logger.info(f"CRA {cra_id} submitted")


def list_days(db: Session, user: AuthUser, cra_id: uuid.UUID) -> list[CraDayDetail]:
    report = get_visible_report(db, user, cra_id)
    return list(report.days)


def replace_days(db: Session, user: AuthUser, cra_id: uuid.UUID, days: list[DayDetailIn]) -> int:
    """Deletes the report's day rows and inserts ``days`` in one transaction."""
    report = get_visible_report(db, user, cra_id)
    db.execute(delete(CraDayDetail).where(CraDayDetail.cra_report_id == report.id))
    for day in days:
        db.add(CraDayDetail(cra_report_id=report.id, date=day.date, state=day.state, comment=day.comment or None))
    db.commit()
    db.expire(report)
    return len(days)


def _consultant_name(profile_name: str | None, profile_email: str | None) -> str:
    return profile_name or profile_email or "Consultant"


def send_validation(db: Session, user: AuthUser, cra_id: uuid.UUID, client_email: str) -> None:
    """
    Issues a validation token valid CRA_VALIDATION_TTL_DAYS and emails the
    approve/reject links to ``client_email``. An approved report cannot be
    sent again; a rejected one gets a fresh token and goes back to "sent".
    """
    row = db.execute(_report_select().where(CraReport.id == cra_id)).first()
    if row is None:
        raise _not_found()
    report, client_name, consultant_email, consultant_name = row
    ensure_owner_or_admin(user, report.user_id)
    if report.client_validation_status == "approved":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Ce CRA a déjà été approuvé par le client")

    token = new_long_token()
    report.client_email = client_email
    report.validation_token = token
    report.token_expires_at = expires_in(days=settings.CRA_VALIDATION_TTL_DAYS)
    report.client_validation_status = "sent"
    report.validated_at = None
    db.commit()

    link = f"{settings.FRONTEND_BASE_URL}/cra/validate?token={token}"
    subject, html = cra_validation_request_email(
        user_name=_consultant_name(consultant_name, consultant_email),
        month_label=month_label(report.month),
        client_name=client_name,
        worked_days=report.worked_days,
        absent_days=report.absent_days,
        comment=report.monthly_comment,
        approve_url=f"{link}&action=approve",
        reject_url=f"{link}&action=reject",
        ttl_days=settings.CRA_VALIDATION_TTL_DAYS,
    )
    send_email_safely(client_email, subject, html)
    logger.info(f"Validation request for CRA {cra_id} sent to {client_email}")


def validate_by_token(db: Session, token: str, action: str) -> dict:
    """
    Records the client's answer. The token is cleared in the same guarded
    UPDATE that flips the status, so a replayed link is refused and never
    sends the approval email twice.
    """
    if not token or not action:
        raise TokenWorkflowError("token et action requis", "Le lien de validation est incomplet.")
    if action not in ACTIONS:
        raise TokenWorkflowError("action invalide", "Action inconnue.")

    row = db.execute(_report_select().where(CraReport.validation_token == token)).first()
    if row is None:
        raise TokenWorkflowError("Token invalide ou expiré", "Ce lien de validation n'est plus valide.")
    report, client_name, consultant_email, consultant_name = row

    if is_expired(report.token_expires_at):
        raise TokenWorkflowError("Token expiré", "Ce lien de validation a expiré.")

    previous = report.client_validation_status
    if previous in ACTIONS.values():
        label = "approuvé" if previous == "approved" else "rejeté"
        raise TokenWorkflowError("Déjà traité", f"Ce CRA a déjà été {label}.", status=previous)

    new_status = ACTIONS[action]
    result = db.execute(
        update(CraReport)
        .where(
            CraReport.id == report.id,
            CraReport.validation_token == token,
            CraReport.client_validation_status.not_in(list(ACTIONS.values())),
        )
        .values(client_validation_status=new_status, validated_at=utcnow(), validation_token=None)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise TokenWorkflowError("Déjà traité", "Ce CRA a déjà été traité.")
    db.commit()
    db.refresh(report)

    label = month_label(report.month)
    logger.info(f"CRA {report.id} {new_status} by client")

    if new_status == "approved":
        notify_approval(db, report, client_name, consultant_email, consultant_name)

    return {
        "success": True,
        "status": new_status,
        "message": (
            f"Le CRA de {label} a été approuvé avec succès."
            if new_status == "approved"
            else f"Le CRA de {label} a été rejeté."
        ),
        "month": label,
        "clientName": client_name,
    }


def build_pdf_data(report: CraReport, client_name: str | None, user_name: str) -> CraPdfData:
    return CraPdfData(
        month=month_label(report.month),
        client_name=client_name or "Non spécifié",
        company_name=report.company_name or settings.COMPANY_NAME,
        user_name=user_name,
        worked_days=report.worked_days,
        absent_days=report.absent_days,
        validated_at=datetime_label(report.validated_at or utcnow()),
        monthly_comment=report.monthly_comment,
        day_details=[DayLine(date=d.date, state=d.state, comment=d.comment) for d in report.days],
    )


def notify_approval(
    db: Session,
    report: CraReport,
    client_name: str | None,
    consultant_email: str | None,
    consultant_name: str | None,
) -> None:
    """
    Emails the PDF receipt to the client and the consultant. Failures are
    logged only: the approval is already committed.
    """
    user_name = _consultant_name(consultant_name, consultant_email)
    try:
        pdf_base64 = generate_cra_pdf(build_pdf_data(report, client_name, user_name))
    except Exception as e:
        logger.error(f"PDF generation failed for CRA {report.id}: {e}", exc_info=True)
        return

    attachments = [{"filename": cra_pdf_filename(user_name, report.month), "content": pdf_base64}]
    subject, html = cra_approved_email(
        user_name=user_name,
        month_label=month_label(report.month),
        client_name=client_name,
        worked_days=report.worked_days,
        absent_days=report.absent_days,
    )
    for recipient in (report.client_email, consultant_email):
        if recipient:
            send_email_safely(recipient, subject, html, attachments)
