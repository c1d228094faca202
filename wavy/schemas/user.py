# wavy/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["admin", "user_cra", "user"]


class UserCreateRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    role: Optional[Role] = None


class RoleAssignRequest(BaseModel):
    role: Role


class UserListItem(BaseModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    created_at: datetime
    roles: list[str] = []


class InvitationCreate(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Invitation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    status: str
    expires_at: datetime
    accepted_at: Optional[datetime] = None
    invited_by: Optional[uuid.UUID] = None
    created_at: datetime


class InvitationWithToken(Invitation):
    """Returned to the invited person only, who already holds the token."""
    token: str


class InvitationAccept(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)
    full_name: Optional[str] = None
