from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.routes.auth import get_current_user
from app.features.matching.schemas.match_request import (
    CreateMatchRequest,
    MatchRequestResponse,
    ResolveMatchRequest,
)
from app.features.matching.services.match_request_service import MatchRequestService
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/matching", tags=["Matching"])


@router.post(
    "/requests",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Send a caravan request",
)
async def create_caravan_request(
    request: CreateMatchRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    caravan_request = await MatchRequestService(db).create(current_user.id, request.target_user_id)
    return api_response(
        data=MatchRequestResponse.model_validate(caravan_request),
        message="Caravan request sent",
        status_code=status.HTTP_201_CREATED,
    )


@router.post(
    "/requests/{request_id}/resolve",
    response_model=dict,
    summary="Accept or reject a caravan request",
)
async def resolve_caravan_request(
    request_id: str,
    request: ResolveMatchRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    caravan_request = await MatchRequestService(db).resolve(
        request_id, request.decision, current_user.id
    )
    return api_response(
        data=MatchRequestResponse.model_validate(caravan_request),
        message=f"Caravan request {caravan_request.status}",
    )


@router.get("/requests", response_model=dict, summary="List caravan requests")
async def list_caravan_requests(
    direction: Literal["incoming", "outgoing", "all"] = Query("all"),
    request_status: Optional[Literal["pending", "accepted", "rejected"]] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    requests = await MatchRequestService(db).list_for_user(
        current_user.id, direction=direction, status=request_status
    )
    return api_response(
        data=[MatchRequestResponse.model_validate(r) for r in requests],
        message="Caravan requests retrieved",
    )
