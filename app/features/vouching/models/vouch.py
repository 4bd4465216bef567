from sqlalchemy import Column, ForeignKey, Index, String, UniqueConstraint

from app.platform.db.base import BaseModel


class Vouch(BaseModel):
    """Directed trust edge voucher -> vouchee. Append only."""
    __tablename__ = "vouches"

    voucher_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vouchee_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("voucher_id", "vouchee_id", name="uq_vouch_pair"),
        Index("ix_vouches_vouchee_id", "vouchee_id"),
    )

    def __repr__(self):
        return f"<Vouch({self.voucher_id} -> {self.vouchee_id})>"
