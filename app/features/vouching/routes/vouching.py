from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.routes.auth import get_current_user
from app.features.vouching.schemas.vouch import (
    ReceivedVouchesResponse,
    ReceivedVouchResponse,
    VoucherSummary,
    VouchResponse,
)
from app.features.vouching.services.vouch_service import ReceivedVouch, VouchService
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/vouching", tags=["Vouching"])


def _received_payload(vouches: list[ReceivedVouch]) -> ReceivedVouchesResponse:
    return ReceivedVouchesResponse(
        count=len(vouches),
        vouches=[
            ReceivedVouchResponse(
                id=v.id,
                voucher=VoucherSummary.model_validate(v.voucher),
                created_at=v.created_at,
            )
            for v in vouches
        ],
    )


@router.get("/received", response_model=dict, summary="Vouches received by the current user")
async def get_received_vouches(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    vouches = await VouchService(db).list_for_user(current_user.id)
    return api_response(data=_received_payload(vouches), message="Vouches retrieved")


@router.get("/users/{user_id}", response_model=dict, summary="Vouches received by a user")
async def get_user_vouches(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    vouches = await VouchService(db).list_for_user(user_id)
    return api_response(data=_received_payload(vouches), message="Vouches retrieved")


@router.post(
    "/{user_id}",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Vouch for a user",
)
async def create_vouch(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    vouch = await VouchService(db).create(current_user.id, user_id)
    return api_response(
        data=VouchResponse.model_validate(vouch),
        message="Vouch recorded",
        status_code=status.HTTP_201_CREATED,
    )
