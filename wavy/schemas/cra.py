# wavy/schemas/cra.py
import uuid
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

CraStatus = Literal["draft", "submitted", "approved", "rejected"]
MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class CraCreate(BaseModel):
    month: str = Field(pattern=MONTH_PATTERN)
    client_id: Optional[uuid.UUID] = None
    company_name: Optional[str] = None
    worked_days: float = Field(default=0, ge=0, le=31)
    absent_days: float = Field(default=0, ge=0, le=31)
    monthly_comment: Optional[str] = None


class CraUpdate(BaseModel):
    client_id: Optional[uuid.UUID] = None
    company_name: Optional[str] = None
    worked_days: Optional[float] = Field(default=None, ge=0, le=31)
    absent_days: Optional[float] = Field(default=None, ge=0, le=31)
    monthly_comment: Optional[str] = None
    # Only honoured for admins
    status: Optional[CraStatus] = None
    admin_comment: Optional[str] = None


class CraReport(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    client_id: Optional[uuid.UUID] = None
    month: str
    company_name: Optional[str] = None
    worked_days: float
    absent_days: float
    monthly_comment: Optional[str] = None
    status: str
    admin_comment: Optional[str] = None
    client_email: Optional[str] = None
    client_validation_status: str
    token_expires_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    client_name: Optional[str] = None
    consultant_email: Optional[str] = None
    consultant_name: Optional[str] = None


class DayDetailIn(BaseModel):
    date: date
    state: str
    comment: Optional[str] = None


class DayDetail(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    cra_report_id: uuid.UUID
    date: date
    state: str
    comment: Optional[str] = None


class SendValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cra_id: uuid.UUID = Field(alias="craId")
    client_email: EmailStr = Field(alias="clientEmail")


class ValidateRequest(BaseModel):
    token: str = ""
    action: str = ""
