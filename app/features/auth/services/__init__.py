from app.features.auth.services.otp_service import OtpIssue, OtpService
from app.features.auth.services.user_service import UserService

__all__ = ["OtpIssue", "OtpService", "UserService"]
