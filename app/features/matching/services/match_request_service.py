from typing import Literal, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.matching.models.match_request import (
    TERMINAL_STATUSES,
    MatchRequest,
    MatchRequestStatus,
)
from app.platform.exceptions import (
    AlreadyResolved,
    DuplicateRequest,
    InvalidInput,
    NotFound,
    Unauthorized,
)
from app.platform.logger import get_logger
from app.platform.utils.time import utcnow

logger = get_logger(__name__)

Direction = Literal["incoming", "outgoing", "all"]


class MatchRequestService:
    """Lifecycle of caravan requests between two users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, requester_id: str, target_id: str) -> MatchRequest:
        """
        Open a pending request from requester to target.

        Raises:
            InvalidInput: requester and target are the same user
            NotFound: the target or the requester does not exist
            DuplicateRequest: a pending request for the pair already exists
        """
        if not requester_id or not target_id:
            raise InvalidInput("Both requester and target are required")
        if requester_id == target_id:
            raise InvalidInput("Cannot send a caravan request to yourself")

        known = await self.db.execute(select(User.id).where(User.id.in_([requester_id, target_id])))
        known_ids = set(known.scalars().all())
        if target_id not in known_ids:
            raise NotFound("User not found")
        if requester_id not in known_ids:
            raise NotFound("Requester not found")

        request = MatchRequest(
            requester_id=requester_id,
            target_id=target_id,
            status=MatchRequestStatus.PENDING.value,
        )
        try:
            # Savepoint: a conflict undoes only this insert, not the caller's session
            async with self.db.begin_nested():
                self.db.add(request)
        except IntegrityError:
            logger.warning(f"Duplicate caravan request {requester_id} -> {target_id}")
            raise DuplicateRequest()

        await self.db.commit()
        await self.db.refresh(request)
        logger.info(f"Caravan request {request.id} opened: {requester_id} -> {target_id}")
        return request

    async def resolve(self, request_id: str, decision: str, acting_user_id: str) -> MatchRequest:
        """
        Accept or reject a pending request. Only the target may resolve it.

        The transition is one conditional UPDATE, so two concurrent resolutions
        cannot both succeed. When nothing was updated the request is inspected
        to report why.

        Raises:
            InvalidInput: decision is not accepted/rejected
            NotFound: no such request
            Unauthorized: acting user is not the target
            AlreadyResolved: request is no longer pending
        """
        try:
            new_status = MatchRequestStatus(decision)
        except ValueError:
            raise InvalidInput(f"Unknown decision '{decision}'")
        if new_status not in TERMINAL_STATUSES:
            raise InvalidInput("Decision must be accepted or rejected")

        result = await self.db.execute(
            update(MatchRequest)
            .where(
                MatchRequest.id == request_id,
                MatchRequest.target_id == acting_user_id,
                MatchRequest.status == MatchRequestStatus.PENDING.value,
            )
            .values(status=new_status.value, resolved_at=utcnow())
            .returning(MatchRequest)
            .execution_options(populate_existing=True)
        )
        resolved = result.scalars().first()
        await self.db.commit()

        if resolved is not None:
            logger.info(f"Caravan request {request_id} {new_status.value} by {acting_user_id}")
            return resolved

        existing = await self.get(request_id)
        if existing.target_id != acting_user_id:
            logger.warning(f"User {acting_user_id} tried to resolve caravan request {request_id}")
            raise Unauthorized("Only the recipient can respond to this caravan request")
        raise AlreadyResolved(f"Caravan request has already been {existing.status}")

    async def get(self, request_id: str) -> MatchRequest:
        result = await self.db.execute(select(MatchRequest).where(MatchRequest.id == request_id))
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFound("Caravan request not found")
        return request

    async def list_for_user(
        self,
        user_id: str,
        direction: Direction = "all",
        status: Optional[str] = None,
    ) -> list[MatchRequest]:
        query = select(MatchRequest)

        if direction == "incoming":
            query = query.where(MatchRequest.target_id == user_id)
        elif direction == "outgoing":
            query = query.where(MatchRequest.requester_id == user_id)
        elif direction == "all":
            query = query.where(
                or_(MatchRequest.requester_id == user_id, MatchRequest.target_id == user_id)
            )
        else:
            raise InvalidInput(f"Unknown direction '{direction}'")

        if status is not None:
            try:
                query = query.where(MatchRequest.status == MatchRequestStatus(status).value)
            except ValueError:
                raise InvalidInput(f"Unknown status '{status}'")

        result = await self.db.execute(
            query.order_by(MatchRequest.created_at.desc(), MatchRequest.id.desc())
        )
        return list(result.scalars().all())
