from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class VouchResponse(BaseModel):
    id: str
    voucher_id: str
    vouchee_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class VoucherSummary(BaseModel):
    """Public profile bits shown next to a received vouch."""
    id: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    nomad_verified: bool = False

    class Config:
        from_attributes = True


class ReceivedVouchResponse(BaseModel):
    id: str
    voucher: VoucherSummary
    created_at: datetime


class ReceivedVouchesResponse(BaseModel):
    count: int
    vouches: list[ReceivedVouchResponse]
