# wavy/schemas/content.py
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class ApplicationCreate(BaseModel):
    job_id: Optional[uuid.UUID] = None
    name: str
    email: EmailStr
    phone: Optional[str] = None
    message: Optional[str] = None
    cv_url: Optional[str] = None


class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    job_id: Optional[uuid.UUID] = None
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    cv_url: Optional[str] = None
    status: str
    created_at: datetime
    job_title: Optional[str] = None


class TrainingLeadCreate(BaseModel):
    training_id: Optional[uuid.UUID] = None
    name: str
    email: EmailStr
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None


class TrainingLeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    training_id: Optional[uuid.UUID] = None
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
    training_title: Optional[str] = None


class ContactCreate(BaseModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str


class CreatedId(BaseModel):
    id: uuid.UUID


class Stats(BaseModel):
    jobs: int
    trainings: int
    applications: int
    training_leads: int
    pending_cra: int
