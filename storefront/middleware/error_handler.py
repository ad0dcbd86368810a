"""Global error handlers for the application.

Every error leaves as `{"success": false, "message", "code", ...extra}`.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.utils.cookies import build_cleared_session_cookie
from storefront.utils.errors import (
    APIError,
    ErrorCode,
    InternalServerError,
    InvalidRequestError,
    MissingFieldsError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    status.HTTP_404_NOT_FOUND: ErrorCode.ROUTE_NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
}


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    clear_session_cookie: bool = False,
) -> JSONResponse:
    content = {"success": False, "message": message, "code": code.value, **(extra or {})}
    response = JSONResponse(status_code=status_code, content=content, headers=headers)
    if clear_session_cookie:
        response.headers.append("set-cookie", build_cleared_session_cookie())
    return response


async def api_error_handler(request: Request, exc: APIError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code.value}")
    headers = {**getattr(request.state, "rate_limit_headers", {}), **(exc.headers or {})}
    return error_response(
        exc.status_code,
        exc.code,
        str(exc.detail),
        extra=exc.extra,
        headers=headers or None,
        clear_session_cookie=exc.clear_session_cookie,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = _STATUS_CODES.get(exc.status_code, ErrorCode.HTTP_ERROR)
    if code is ErrorCode.ROUTE_NOT_FOUND:
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors and all(error.get("type") == "missing" for error in errors):
        missing = [str(error["loc"][-1]) for error in errors]
        return await api_error_handler(request, MissingFieldsError(missing))

    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg", "Invalid value"),
        }
        for error in errors
    ]
    return await api_error_handler(request, InvalidRequestError(errors=details))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR,
        InternalServerError().detail,
    )
