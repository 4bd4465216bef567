from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class CreateMatchRequest(BaseModel):
    target_user_id: str = Field(min_length=1, max_length=64)

    class Config:
        json_schema_extra = {"example": {"target_user_id": "0190f1d2-7c4e-7b1a-9c1e-2f6d7a8b9c0d"}}


class ResolveMatchRequest(BaseModel):
    decision: Literal["accepted", "rejected"]

    class Config:
        json_schema_extra = {"example": {"decision": "accepted"}}


class MatchRequestResponse(BaseModel):
    id: str
    requester_id: str
    target_id: str
    status: Literal["pending", "accepted", "rejected"]
    created_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True
