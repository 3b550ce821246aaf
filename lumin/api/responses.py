"""Response envelope helpers

Every JSON response is shaped {success, message?, data?, error?}.
"""
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any = None, message: Optional[str] = None) -> dict:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return body


def error_response(
    status_code: int,
    message: str,
    error: Optional[Any] = None,
    data: Optional[Any] = None
) -> JSONResponse:
    body: dict = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
