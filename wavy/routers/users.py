# wavy/routers/users.py

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models import Profile, User, UserRole
from ..schemas.user import (
    Invitation,
    InvitationAccept,
    InvitationCreate,
    InvitationWithToken,
    RoleAssignRequest,
    UserCreateRequest,
    UserListItem,
)
from ..security.deps import AuthUser, require_admin
from ..services import invitations as invitation_service
from ..services.auth import create_account, grant_role, to_auth_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserListItem])
def list_users(db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    """Every profile with its roles, newest first."""
    profiles = db.execute(select(Profile).order_by(Profile.created_at.desc())).scalars().all()
    roles: dict[uuid.UUID, list[str]] = {}
    for user_id, role in db.execute(select(UserRole.user_id, UserRole.role).order_by(UserRole.created_at)):
        roles.setdefault(user_id, []).append(role)

    return [
        UserListItem(
            id=p.id,
            email=p.email,
            full_name=p.full_name,
            created_at=p.created_at,
            roles=roles.get(p.id, []),
        )
        for p in profiles
    ]


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreateRequest, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    # "user" is the implicit default role and is never stored
    role = payload.role if payload.role and payload.role != "user" else None
    user = create_account(db, email=payload.email, password=payload.password, role=role)
    db.commit()
    return {"user": {"id": str(user.id), "email": user.email}}


@router.post("/{user_id}/roles")
def assign_role(
    user_id: uuid.UUID,
    payload: RoleAssignRequest,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    if db.get(User, user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur introuvable")
    grant_role(db, user_id, payload.role)
    db.commit()
    return {"success": True}


@router.delete("/{user_id}/roles/{role}")
def remove_role(user_id: uuid.UUID, role: str, db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    db.execute(delete(UserRole).where(UserRole.user_id == user_id, UserRole.role == role))
    db.commit()
    return {"success": True}


# --- Invitations ---

@router.post("/invitations", response_model=Invitation, status_code=status.HTTP_201_CREATED)
def create_invitation(
    payload: InvitationCreate,
    db: Session = Depends(get_db),
    admin: AuthUser = Depends(require_admin),
):
    return invitation_service.create_invitation(
        db,
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        invited_by=admin.id,
    )


@router.get("/invitations/all", response_model=List[Invitation])
def list_invitations(db: Session = Depends(get_db), admin: AuthUser = Depends(require_admin)):
    return invitation_service.list_invitations(db)


@router.get("/invitations", response_model=InvitationWithToken)
def get_invitation(token: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Public: lets the signup page check the link before asking for a password."""
    return invitation_service.get_pending_invitation(db, token)


@router.post("/invitations/accept", status_code=status.HTTP_201_CREATED)
def accept_invitation(payload: InvitationAccept, db: Session = Depends(get_db)):
    user = invitation_service.accept_invitation(
        db, token=payload.token, password=payload.password, full_name=payload.full_name
    )
    auth_user = to_auth_user(db, user)
    return {"success": True, "user": auth_user.model_dump(mode="json")}
