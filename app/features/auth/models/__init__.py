from app.features.auth.models.otp import OtpCode
from app.features.auth.models.user import User

__all__ = ["OtpCode", "User"]
