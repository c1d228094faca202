# wavy/schemas/job.py
import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

JobStatus = Literal["draft", "published", "archived"]


class JobBase(BaseModel):
    title: str
    slug: str
    description_html: Optional[str] = None
    contract_type: Optional[str] = None
    location: Optional[str] = None
    domain: Optional[str] = None
    experience: Optional[str] = None
    salary: Optional[str] = None
    status: str = "draft"
    featured: bool = False


class JobCreate(JobBase):
    status: JobStatus = "draft"


class JobUpdate(BaseModel):
    """Partial update; only the fields sent are written."""
    title: Optional[str] = None
    slug: Optional[str] = None
    description_html: Optional[str] = None
    contract_type: Optional[str] = None
    location: Optional[str] = None
    domain: Optional[str] = None
    experience: Optional[str] = None
    salary: Optional[str] = None
    status: Optional[JobStatus] = None
    featured: Optional[bool] = None


class Job(JobBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
