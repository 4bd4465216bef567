from sqlalchemy import Column, DateTime, Index, String

from app.platform.db.base import BaseModel


class OtpCode(BaseModel):
    """
    One-time login code sent to an email address.

    Rows are single use: a successful verification deletes the row, and rows
    past expires_at are purged by OtpService.purge_expired.
    """
    __tablename__ = "otp_codes"

    email = Column(String(255), nullable=False, index=True)
    code = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_otp_codes_email_code", "email", "code"),
        Index("ix_otp_codes_expires_at", "expires_at"),
    )

    def __repr__(self):
        return f"<OtpCode(email={self.email}, expires_at={self.expires_at})>"
