# wavy/schemas/auth.py

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    metadata: dict = Field(default_factory=dict)


class AuthUserOut(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    roles: list[str]


class LoginResponse(BaseModel):
    token: str
    user: AuthUserOut
    otpRequired: bool = False


class SignupResponse(BaseModel):
    user: AuthUserOut


class ResetPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordConfirm(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)


# --- OTP (the client sends camelCase keys) ---

class OtpSendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    # Accepted for compatibility; the code always goes to the stored address.
    email: Optional[str] = None


class OtpVerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    code: Optional[str] = None
    check_only: bool = Field(default=False, alias="checkOnly")
