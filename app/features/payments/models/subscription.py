import enum

from sqlalchemy import Column, DateTime, String

from app.platform.db.base import BaseModel


class SubscriptionState(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class SubscriptionPlan(str, enum.Enum):
    FREE = "free"
    VANTAGE_PRO = "vantage_pro"


class Subscription(BaseModel):
    """
    Entitlement of one app user, keyed by the RevenueCat app_user_id.
    Written only by SubscriptionService from billing events.
    """
    __tablename__ = "subscriptions"

    app_user_id = Column(String(255), unique=True, nullable=False, index=True)
    status = Column(String(16), nullable=False, default=SubscriptionState.EXPIRED.value)
    plan = Column(String(32), nullable=False, default=SubscriptionPlan.FREE.value)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    revenue_cat_id = Column(String(255), nullable=True)
    product_id = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Subscription(app_user_id={self.app_user_id}, status={self.status}, plan={self.plan})>"
