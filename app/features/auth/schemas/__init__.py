from app.features.auth.schemas.auth import (
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "OtpRequest",
    "OtpRequestResponse",
    "OtpVerifyRequest",
    "TokenResponse",
    "UserResponse",
]
