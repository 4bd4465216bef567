"""Imports every model so Base.metadata knows all tables."""

from app.features.auth.models.otp import OtpCode
from app.features.auth.models.user import User
from app.features.matching.models.match_request import MatchRequest
from app.features.payments.models.subscription import Subscription
from app.features.vouching.models.vouch import Vouch
from app.platform.db.base import Base

__all__ = ["Base", "OtpCode", "User", "MatchRequest", "Subscription", "Vouch"]
