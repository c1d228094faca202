# wavy/routers/trainings.py

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models import Category as CategoryModel, Training as TrainingModel
from ..schemas.training import Category, Training, TrainingCreate, TrainingUpdate
from ..security.deps import AuthUser, require_admin
from ..services.tokens import utcnow

router = APIRouter(prefix="/trainings", tags=["Trainings"])


def _with_category(training: TrainingModel, category_name: str | None) -> Training:
    out = Training.model_validate(training)
    out.category_name = category_name
    return out


def _load(db: Session, training_id: uuid.UUID) -> Training:
    row = db.execute(
        select(TrainingModel, CategoryModel.name)
        .outerjoin(CategoryModel, CategoryModel.id == TrainingModel.category_id)
        .where(TrainingModel.id == training_id)
    ).first()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Formation introuvable")
    return _with_category(*row)


def _stamp_publication(training: TrainingModel) -> None:
    if training.status == "published" and training.published_at is None:
        training.published_at = utcnow()


@router.get("", response_model=List[Training])
def list_trainings(
    status_filter: Optional[str] = Query(None, alias="status"),
    slug: Optional[str] = None,
    db: Session = Depends(get_db),
):
    stmt = (
        select(TrainingModel, CategoryModel.name)
        .outerjoin(CategoryModel, CategoryModel.id == TrainingModel.category_id)
        .order_by(TrainingModel.created_at.desc())
    )
    if status_filter:
        stmt = stmt.where(TrainingModel.status == status_filter)
    if slug:
        stmt = stmt.where(TrainingModel.slug == slug)
    return [_with_category(training, name) for training, name in db.execute(stmt).all()]


@router.get("/categories", response_model=List[Category])
def list_categories(db: Session = Depends(get_db)):
    return db.execute(
        select(CategoryModel).where(CategoryModel.type == "formation").order_by(CategoryModel.name)
    ).scalars().all()


@router.post("", response_model=Training, status_code=201)
def create_training(payload: TrainingCreate, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    training = TrainingModel(**payload.model_dump())
    _stamp_publication(training)
    db.add(training)
    db.commit()
    return _load(db, training.id)


@router.put("/{training_id}", response_model=Training)
def update_training(
    training_id: uuid.UUID,
    payload: TrainingUpdate,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    training = db.get(TrainingModel, training_id)
    if training is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Formation introuvable")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(training, key, value)
    _stamp_publication(training)
    db.commit()
    return _load(db, training.id)


@router.delete("/{training_id}")
def delete_training(training_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    training = db.get(TrainingModel, training_id)
    if training is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Formation introuvable")
    db.delete(training)
    db.commit()
    return {"success": True}
