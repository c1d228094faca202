# wavy/schemas/training.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

TrainingStatus = Literal["draft", "published", "archived"]


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: Optional[str] = None
    type: str


class TrainingBase(BaseModel):
    title: str
    slug: str
    modality: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    duration_hours: Optional[int] = None
    price: Optional[Decimal] = None
    description_html: Optional[str] = None
    goals_html: Optional[str] = None
    program_html: Optional[str] = None
    prerequisites_html: Optional[str] = None
    audience_html: Optional[str] = None
    status: str = "draft"
    featured: bool = False


class TrainingCreate(TrainingBase):
    status: TrainingStatus = "draft"


class TrainingUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    modality: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    duration_hours: Optional[int] = None
    price: Optional[Decimal] = None
    description_html: Optional[str] = None
    goals_html: Optional[str] = None
    program_html: Optional[str] = None
    prerequisites_html: Optional[str] = None
    audience_html: Optional[str] = None
    status: Optional[TrainingStatus] = None
    featured: Optional[bool] = None


class Training(TrainingBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    category_name: Optional[str] = None
