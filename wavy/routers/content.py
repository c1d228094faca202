# wavy/routers/content.py
#
# Public site inbound (applications, training leads, contact form, CV upload)
# and the admin views over them.

import logging
import re
import time
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..config import settings
from ..db.session import get_db
from ..models import Application, ContactMessage, CraReport, Job, Training, TrainingLead
from ..schemas.content import (
    ApplicationCreate,
    ApplicationOut,
    ContactCreate,
    CreatedId,
    Stats,
    TrainingLeadCreate,
    TrainingLeadOut,
)
from ..security.deps import AuthUser, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Content"])

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
CHUNK_SIZE = 1024 * 1024


@router.post("/applications", response_model=CreatedId, status_code=status.HTTP_201_CREATED)
def create_application(payload: ApplicationCreate, db: Session = Depends(get_db)):
    application = Application(**payload.model_dump())
    db.add(application)
    db.commit()
    logger.info(f"New application {application.id} for job {application.job_id}")
    return CreatedId(id=application.id)


@router.get("/applications", response_model=List[ApplicationOut])
def list_applications(db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    rows = db.execute(
        select(Application, Job.title)
        .outerjoin(Job, Job.id == Application.job_id)
        .order_by(Application.created_at.desc())
    ).all()
    results = []
    for application, job_title in rows:
        item = ApplicationOut.model_validate(application)
        item.job_title = job_title
        results.append(item)
    return results


@router.post("/training-leads", response_model=CreatedId, status_code=status.HTTP_201_CREATED)
def create_training_lead(payload: TrainingLeadCreate, db: Session = Depends(get_db)):
    lead = TrainingLead(**payload.model_dump())
    db.add(lead)
    db.commit()
    return CreatedId(id=lead.id)


@router.get("/training-leads", response_model=List[TrainingLeadOut])
def list_training_leads(db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    rows = db.execute(
        select(TrainingLead, Training.title)
        .outerjoin(Training, Training.id == TrainingLead.training_id)
        .order_by(TrainingLead.created_at.desc())
    ).all()
    results = []
    for lead, training_title in rows:
        item = TrainingLeadOut.model_validate(lead)
        item.training_title = training_title
        results.append(item)
    return results


@router.post("/contact", response_model=CreatedId, status_code=status.HTTP_201_CREATED)
def create_contact_message(payload: ContactCreate, db: Session = Depends(get_db)):
    message = ContactMessage(**payload.model_dump())
    db.add(message)
    db.commit()
    return CreatedId(id=message.id)


# --- CV upload ---

def stored_filename(original: str | None) -> str:
    """Timestamp-prefixed name restricted to a safe character set."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", original or "fichier")
    return f"{int(time.time() * 1000)}-{cleaned}"


@router.post("/upload")
def upload_cv(file: UploadFile = File(...)):
    """
    Stores one CV under UPLOAD_DIR/cvs and returns the stored file name, which
    the application form then sends as ``cv_url``.
    """
    target_dir = settings.cv_upload_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / stored_filename(file.filename)

    written = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.MAX_UPLOAD_BYTES:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail="Fichier trop volumineux",
                    )
                out.write(chunk)
    except HTTPException:
        target.unlink(missing_ok=True)
        raise

    if written == 0:
        target.unlink(missing_ok=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Aucun fichier")

    logger.info(f"CV stored as {target.name} ({written} bytes)")
    return {"path": target.name}


@router.get("/uploads/cvs/{filename}")
def download_cv(filename: str, admin: AuthUser = Depends(require_admin)):
    base = settings.cv_upload_dir.resolve()
    path = (base / filename).resolve()
    if path.parent != base:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nom de fichier invalide")
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fichier introuvable")
    return FileResponse(path)


@router.get("/stats", response_model=Stats)
def stats(db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    def count(model, *where) -> int:
        return db.execute(select(func.count()).select_from(model).where(*where)).scalar_one()

    return Stats(
        jobs=count(Job),
        trainings=count(Training),
        applications=count(Application),
        training_leads=count(TrainingLead),
        pending_cra=count(CraReport, CraReport.status == "submitted"),
    )
