# wavy/routers/clients.py

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models import Client as ClientModel, ClientValidator, UserClientAssignment
from ..schemas.client import Assignment, AssignmentIn, Client, ClientIn, Validator, ValidatorIn
from ..security.deps import ADMIN, USER_CRA, AuthUser, require_admin, require_roles

router = APIRouter(prefix="/clients", tags=["Clients"])


def _get_client_or_404(db: Session, client_id: uuid.UUID) -> ClientModel:
    client = db.get(ClientModel, client_id)
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client introuvable")
    return client


@router.get("", response_model=List[Client])
def list_clients(db: Session = Depends(get_db), user: AuthUser = Depends(require_roles(ADMIN, USER_CRA))):
    """Admins see every client, consultants the clients they are assigned to."""
    stmt = select(ClientModel).order_by(ClientModel.name)
    if not user.is_admin:
        stmt = stmt.join(UserClientAssignment, UserClientAssignment.client_id == ClientModel.id).where(
            UserClientAssignment.user_id == user.id
        )
    return db.execute(stmt).scalars().all()


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientIn, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    client = ClientModel(**payload.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


@router.put("/{client_id}", response_model=Client)
def update_client(
    client_id: uuid.UUID,
    payload: ClientIn,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    client = _get_client_or_404(db, client_id)
    for key, value in payload.model_dump().items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    return client


@router.delete("/{client_id}")
def delete_client(client_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    db.delete(_get_client_or_404(db, client_id))
    db.commit()
    return {"success": True}


# --- Assignments (consultant <-> client) ---

@router.get("/assignments", response_model=List[Assignment])
def list_assignments(
    user_id: Optional[uuid.UUID] = Query(default=None, alias="userId"),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_roles(ADMIN, USER_CRA)),
):
    # Consultants only ever see their own assignments, whatever they ask for
    if not user.is_admin:
        user_id = user.id

    stmt = (
        select(UserClientAssignment, ClientModel.name, ClientValidator.name, ClientValidator.email)
        .join(ClientModel, ClientModel.id == UserClientAssignment.client_id)
        .outerjoin(ClientValidator, ClientValidator.id == UserClientAssignment.default_validator_id)
        .order_by(ClientModel.name)
    )
    if user_id is not None:
        stmt = stmt.where(UserClientAssignment.user_id == user_id)

    results = []
    for assignment, client_name, validator_name, validator_email in db.execute(stmt).all():
        item = Assignment.model_validate(assignment)
        item.client_name = client_name
        item.validator_name = validator_name
        item.validator_email = validator_email
        results.append(item)
    return results


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
def create_assignment(payload: AssignmentIn, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    """Assigning the same consultant twice to a client is a no-op."""
    existing = db.execute(
        select(UserClientAssignment).where(
            UserClientAssignment.user_id == payload.user_id,
            UserClientAssignment.client_id == payload.client_id,
        )
    ).scalar_one_or_none()
    if existing is not None:
        return {"success": True}

    assignment = UserClientAssignment(**payload.model_dump())
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return Assignment.model_validate(assignment)


@router.delete("/assignments/{assignment_id}")
def delete_assignment(assignment_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    db.execute(delete(UserClientAssignment).where(UserClientAssignment.id == assignment_id))
    db.commit()
    return {"success": True}


# --- Validators ---

@router.get("/{client_id}/validators", response_model=List[Validator])
def list_validators(client_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    return db.execute(
        select(ClientValidator).where(ClientValidator.client_id == client_id).order_by(ClientValidator.created_at.desc())
    ).scalars().all()


@router.post("/{client_id}/validators", response_model=Validator, status_code=status.HTTP_201_CREATED)
def create_validator(
    client_id: uuid.UUID,
    payload: ValidatorIn,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    _get_client_or_404(db, client_id)
    validator = ClientValidator(client_id=client_id, **payload.model_dump())
    db.add(validator)
    db.commit()
    db.refresh(validator)
    return validator


@router.delete("/validators/{validator_id}")
def delete_validator(validator_id: uuid.UUID, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    db.execute(delete(ClientValidator).where(ClientValidator.id == validator_id))
    db.commit()
    return {"success": True}
