from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.otp import OtpCode
from app.features.auth.utils.security import generate_otp
from app.platform.config import settings
from app.platform.exceptions import Expired, InvalidCode, InvalidInput
from app.platform.logger import get_logger
from app.platform.utils.time import as_utc, utcnow

logger = get_logger(__name__)


@dataclass(frozen=True)
class OtpIssue:
    email: str
    code: str
    expires_at: datetime


def normalize_email(email: str) -> str:
    return email.strip().lower()


class OtpService:
    """
    Issues and consumes one-time login codes.

    Only one code per email is live at a time: issuing a new code deletes the
    previous ones. Consumption is a single DELETE ... RETURNING so a code can
    be redeemed at most once, even when the same request is retried in
    parallel.
    """

    def __init__(
        self,
        db: AsyncSession,
        ttl_seconds: int = settings.OTP_TTL_SECONDS,
        code_length: int = settings.OTP_LENGTH,
    ):
        self.db = db
        self.ttl_seconds = ttl_seconds
        self.code_length = code_length

    async def issue(self, email: str) -> OtpIssue:
        email = normalize_email(email)
        if not email:
            raise InvalidInput("Email is required")

        now = utcnow()
        issued = OtpIssue(
            email=email,
            code=generate_otp(self.code_length),
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )

        await self.db.execute(
            delete(OtpCode)
            .where((OtpCode.expires_at <= now) | (OtpCode.email == email))
            .execution_options(synchronize_session=False)
        )
        self.db.add(OtpCode(email=email, code=issued.code, expires_at=issued.expires_at))
        await self.db.commit()

        logger.info(f"Issued login code for {email}, expires at {issued.expires_at.isoformat()}")
        return issued

    async def verify(self, email: str, code: str) -> None:
        email = normalize_email(email)
        code = code.strip()

        result = await self.db.execute(
            delete(OtpCode)
            .where(OtpCode.email == email, OtpCode.code == code)
            .returning(OtpCode.expires_at)
            .execution_options(synchronize_session=False)
        )
        consumed = result.scalars().all()
        await self.db.commit()

        if not consumed:
            logger.warning(f"Rejected login code for {email}: no matching code")
            raise InvalidCode()

        if max(as_utc(expires_at) for expires_at in consumed) <= utcnow():
            logger.warning(f"Rejected login code for {email}: code expired")
            raise Expired()

        logger.info(f"Login code consumed for {email}")

    async def purge_expired(self) -> int:
        result = await self.db.execute(
            delete(OtpCode)
            .where(OtpCode.expires_at <= utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        purged = result.rowcount or 0
        if purged:
            logger.info(f"Purged {purged} expired login codes")
        return purged
