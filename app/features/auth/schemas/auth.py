from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, EmailStr, StringConstraints

OtpCodeStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=4, max_length=10, pattern=r"^\d+$")]


class OtpRequest(BaseModel):
    email: EmailStr

    class Config:
        json_schema_extra = {"example": {"email": "nomad@example.com"}}


class OtpRequestResponse(BaseModel):
    email: str
    expires_at: datetime


class OtpVerifyRequest(BaseModel):
    email: EmailStr
    code: OtpCodeStr

    class Config:
        json_schema_extra = {"example": {"email": "nomad@example.com", "code": "123456"}}


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    is_active: bool
    nomad_verified: bool
    vouch_count: int
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    is_new_user: bool
    user: UserResponse
