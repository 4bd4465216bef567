from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.auth.models.user import User
from app.features.auth.schemas.auth import (
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    TokenResponse,
    UserResponse,
)
from app.features.auth.services.email_service import send_login_code
from app.features.auth.services.otp_service import OtpService
from app.features.auth.services.user_service import UserService
from app.features.auth.utils.security import create_access_token, decode_access_token
from app.platform.config import settings
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/auth", tags=["Authentication"])
security = HTTPBearer()


@router.post(
    "/otp/request",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Request a login code",
    description="Send a one-time login code to the given email address",
)
async def request_login_code(
    request: OtpRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    issued = await OtpService(db).issue(request.email)

    background_tasks.add_task(send_login_code, to_email=issued.email, code=issued.code)

    return api_response(
        data=OtpRequestResponse(email=issued.email, expires_at=issued.expires_at),
        message="Login code sent. Please check your email.",
    )


@router.post(
    "/otp/verify",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Verify a login code",
    description="Consume a one-time login code and return an access token",
)
async def verify_login_code(
    request: OtpVerifyRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Verify the emailed code.
    - Fails with INVALID_CODE when the code does not match or was already used
    - Fails with CODE_EXPIRED when the code is past its expiry
    The account is created on first successful login.
    """
    await OtpService(db).verify(request.email, request.code)

    user, created = await UserService(db).activate_by_email(request.email)
    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})

    token_response = TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        is_new_user=created,
        user=UserResponse.model_validate(user),
    )
    return api_response(data=token_response, message="Login successful")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to get the current authenticated user.
    """
    try:
        payload = decode_access_token(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserService(db).get_user_by_id(user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


@router.get("/me", response_model=dict, summary="Get the current user")
async def get_me(current_user: User = Depends(get_current_user)):
    return api_response(data=UserResponse.model_validate(current_user), message="User retrieved")
