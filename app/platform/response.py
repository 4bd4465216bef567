from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
    error_code: Optional[str] = None,
) -> JSONResponse:
    """
    Envelope for every API response.
    status is "success" below 400 and "error" otherwise; error responses
    carry the machine readable error_code when one is known.
    """
    status_str = "success" if status_code < 400 else "error"
    content = {
        "status_code": status_code,
        "status": status_str,
        "message": message,
        "data": jsonable_encoder(data) if data is not None else {},
    }
    if error_code:
        content["error_code"] = error_code

    return JSONResponse(status_code=status_code, content=content)
