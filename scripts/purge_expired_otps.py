import asyncio

from app.features.auth.services.otp_service import OtpService
from app.platform.db.session import SessionLocal


async def purge_expired_otps():
    async with SessionLocal() as db:
        purged = await OtpService(db).purge_expired()
        print(f"✅ Purged {purged} expired login codes")


if __name__ == "__main__":
    asyncio.run(purge_expired_otps())
