import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, text

from app.platform.db.base import BaseModel


class MatchRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({MatchRequestStatus.ACCEPTED, MatchRequestStatus.REJECTED})


class MatchRequest(BaseModel):
    """
    Caravan request from requester to target.

    Lifecycle: pending -> accepted | rejected. Terminal states never change.
    At most one pending request exists per ordered (requester, target) pair;
    the partial unique index below enforces it, so once a request is resolved
    the requester may ask again.
    """
    __tablename__ = "match_requests"

    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=MatchRequestStatus.PENDING.value)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_match_requests_pending_pair",
            "requester_id",
            "target_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    def __repr__(self):
        return f"<MatchRequest(id={self.id}, {self.requester_id} -> {self.target_id}, status={self.status})>"
