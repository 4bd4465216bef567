import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.response import api_response


class CaravanError(Exception):
    """Base class for every failure the core reports to its caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "ERROR"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CaravanError):
    error_code = "INVALID_INPUT"
    default_message = "Invalid input"


class InvalidCode(CaravanError):
    error_code = "INVALID_CODE"
    default_message = "Invalid verification code"


class Expired(CaravanError):
    error_code = "CODE_EXPIRED"
    default_message = "Verification code has expired"


class DuplicateRequest(CaravanError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "DUPLICATE_REQUEST"
    default_message = "A pending caravan request already exists for this user"


class DuplicateVouch(CaravanError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "DUPLICATE_VOUCH"
    default_message = "Already vouched for this user"


class NotFound(CaravanError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class Unauthorized(CaravanError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "UNAUTHORIZED"
    default_message = "Not allowed to perform this action"


class AlreadyResolved(CaravanError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ALREADY_RESOLVED"
    default_message = "Caravan request has already been resolved"


class UnknownEvent(CaravanError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "UNKNOWN_EVENT"
    default_message = "Unknown webhook event type"


class BillingUnavailable(CaravanError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "BILLING_UNAVAILABLE"
    default_message = "Billing provider is unavailable"


def add_exception_handlers(app):
    @app.exception_handler(CaravanError)
    async def caravan_error_handler(request: Request, exc: CaravanError):
        return api_response(
            message=exc.message,
            status_code=exc.status_code,
            error_code=exc.error_code,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logging.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
