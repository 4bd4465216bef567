from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.vouching.models.vouch import Vouch
from app.platform.config import settings
from app.platform.exceptions import DuplicateVouch, InvalidInput, NotFound
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReceivedVouch:
    id: str
    voucher: User
    created_at: datetime


class VouchService:
    """
    Trust ledger. A user may vouch for another user once; vouches are
    permanent. Reaching the verification threshold marks the vouchee as a
    verified nomad.
    """

    def __init__(self, db: AsyncSession, verification_threshold: int = settings.VOUCH_VERIFICATION_THRESHOLD):
        self.db = db
        self.verification_threshold = verification_threshold

    async def create(self, voucher_id: str, vouchee_id: str) -> Vouch:
        if not voucher_id or not vouchee_id:
            raise InvalidInput("Both voucher and vouchee are required")
        if voucher_id == vouchee_id:
            raise InvalidInput("Cannot vouch for yourself")

        known = await self.db.execute(select(User.id).where(User.id.in_([voucher_id, vouchee_id])))
        known_ids = set(known.scalars().all())
        if vouchee_id not in known_ids:
            raise NotFound("User not found")
        if voucher_id not in known_ids:
            raise NotFound("Voucher not found")

        vouch = Vouch(voucher_id=voucher_id, vouchee_id=vouchee_id)
        try:
            async with self.db.begin_nested():
                self.db.add(vouch)
        except IntegrityError:
            logger.warning(f"Duplicate vouch {voucher_id} -> {vouchee_id}")
            raise DuplicateVouch()

        # Counter and badge move in the same transaction as the edge
        new_count = User.vouch_count + 1
        await self.db.execute(
            update(User)
            .where(User.id == vouchee_id)
            .values(
                vouch_count=new_count,
                nomad_verified=case(
                    (new_count >= self.verification_threshold, True),
                    else_=User.nomad_verified,
                ),
            )
        )
        await self.db.commit()
        await self.db.refresh(vouch)

        logger.info(f"Vouch {vouch.id} recorded: {voucher_id} -> {vouchee_id}")
        return vouch

    async def list_for_user(self, user_id: str) -> list[ReceivedVouch]:
        """Every vouch the user received, newest first, with the voucher's profile."""
        result = await self.db.execute(
            select(Vouch, User)
            .join(User, User.id == Vouch.voucher_id)
            .where(Vouch.vouchee_id == user_id)
            .order_by(Vouch.created_at.desc(), Vouch.id.desc())
        )
        return [
            ReceivedVouch(id=vouch.id, voucher=voucher, created_at=vouch.created_at)
            for vouch, voucher in result.all()
        ]

    async def count_for_user(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Vouch).where(Vouch.vouchee_id == user_id)
        )
        return result.scalar_one()
