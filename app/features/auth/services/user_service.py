from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.services.otp_service import normalize_email
from app.platform.logger import get_logger
from app.platform.utils.time import utcnow

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def activate_by_email(self, email: str) -> tuple[User, bool]:
        """
        Mark the account behind a verified email as active, creating it on
        first login.

        Returns:
            (user, created)
        """
        email = normalize_email(email)
        created = False

        user = await self.get_user_by_email(email)
        if user is None:
            try:
                async with self.db.begin_nested():
                    self.db.add(User(email=email, name=email.split("@")[0], is_active=True))
                created = True
                logger.info(f"Created account for {email}")
            except IntegrityError:
                # A parallel verification for the same email created it first
                logger.info(f"Account for {email} was created concurrently")

        await self.db.execute(
            update(User)
            .where(User.email == email)
            .values(is_active=True, last_login=utcnow())
        )
        await self.db.commit()

        result = await self.db.execute(
            select(User)
            .where(User.email == email)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one(), created
