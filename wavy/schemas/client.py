# wavy/schemas/client.py
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class ClientIn(BaseModel):
    name: str
    contact_email: Optional[EmailStr] = None
    contact_name: Optional[str] = None
    address: Optional[str] = None


class Client(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    contact_email: Optional[str] = None
    contact_name: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime


class AssignmentIn(BaseModel):
    user_id: uuid.UUID
    client_id: uuid.UUID
    mission_name: Optional[str] = None
    default_validator_id: Optional[uuid.UUID] = None


class Assignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    client_id: uuid.UUID
    mission_name: Optional[str] = None
    default_validator_id: Optional[uuid.UUID] = None
    created_at: datetime
    client_name: Optional[str] = None
    validator_name: Optional[str] = None
    validator_email: Optional[str] = None


class ValidatorIn(BaseModel):
    name: str
    email: EmailStr


class Validator(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    client_id: uuid.UUID
    name: str
    email: str
    created_at: datetime
