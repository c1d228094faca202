# wavy/routers/jobs.py

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models import Job as JobModel
from ..schemas.job import Job, JobCreate, JobUpdate
from ..security.deps import AuthUser, require_admin

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _get_job_or_404(db: Session, job_id: uuid.UUID) -> JobModel:
    job = db.get(JobModel, job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Offre introuvable")
    return job


@router.get("", response_model=List[Job])
def list_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    slug: Optional[str] = None,
    featured: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """Public listing; the site passes ``status=published``."""
    stmt = select(JobModel).order_by(JobModel.created_at.desc())
    if status_filter:
        stmt = stmt.where(JobModel.status == status_filter)
    if slug:
        stmt = stmt.where(JobModel.slug == slug)
    if featured is not None:
        stmt = stmt.where(JobModel.featured == featured)
    return db.execute(stmt).scalars().all()


@router.post("", response_model=Job, status_code=201)
def create_job(payload: JobCreate, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    job = JobModel(**payload.model_dump())
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


@router.put("/{job_id}", response_model=Job)
def update_job(
    job_id: uuid.UUID,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    job = _get_job_or_404(db, job_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


@router.delete("/{job_id}")
def delete_job(job_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    db.delete(_get_job_or_404(db, job_id))
    db.commit()
    return {"success": True}
