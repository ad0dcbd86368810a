"""Custom error definitions for API exceptions.

Every error the API returns is one of `ErrorCode`; the exception classes
below pin each code to its HTTP status. `middleware.error_handler` turns them
into `{"success": false, "message", "code", ...}` bodies.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from starlette import status


class ErrorCode(str, Enum):
    # 400
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_PHONE = "INVALID_PHONE"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_CURRENT_PASSWORD = "INVALID_CURRENT_PASSWORD"
    # 401
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NO_SESSION = "NO_SESSION"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    # 403
    ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    FORBIDDEN = "FORBIDDEN"
    # 404 / 405
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    # 409
    USER_EXISTS = "USER_EXISTS"
    # 429
    RATE_LIMITED = "RATE_LIMITED"
    # 500
    INTERNAL_ERROR = "INTERNAL_ERROR"
    HTTP_ERROR = "HTTP_ERROR"


class APIError(HTTPException):
    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        clear_session_cookie: bool = False,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.extra = extra or {}
        self.clear_session_cookie = clear_session_cookie


class MissingFieldsError(APIError):
    def __init__(self, missing: List[str], detail: str = "Missing required fields"):
        super().__init__(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_FIELDS, detail, extra={"missing": missing})


class InvalidRequestError(APIError):
    def __init__(self, detail: str = "Invalid request", errors: Optional[List[Any]] = None):
        extra = {"errors": errors} if errors else None
        super().__init__(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_REQUEST, detail, extra=extra)


class InvalidEmailError(APIError):
    def __init__(self, detail: str = "Invalid email format"):
        super().__init__(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_EMAIL, detail)


class InvalidPhoneError(APIError):
    def __init__(self, detail: str = "Invalid phone format"):
        super().__init__(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_PHONE, detail)


class WeakPasswordError(APIError):
    def __init__(self, errors: List[str], strength: str, detail: str = "Password does not meet requirements"):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.WEAK_PASSWORD,
            detail,
            extra={"errors": errors, "strength": strength},
        )


class InvalidCurrentPasswordError(APIError):
    def __init__(self, detail: str = "Current password is incorrect"):
        super().__init__(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_CURRENT_PASSWORD, detail)


class InvalidCredentialsError(APIError):
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, ErrorCode.INVALID_CREDENTIALS, detail)


class SessionError(APIError):
    """401 raised by the session gate. Clears the client cookie unless told otherwise."""

    def __init__(self, code: ErrorCode, detail: str, clear_session_cookie: bool = True):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            code,
            detail,
            clear_session_cookie=clear_session_cookie,
        )


class AccountInactiveError(APIError):
    def __init__(self, account_status: str, detail: str = "Account is not active", clear_session_cookie: bool = False):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            ErrorCode.ACCOUNT_INACTIVE,
            detail,
            extra={"status": account_status},
            clear_session_cookie=clear_session_cookie,
        )


class AdminRequiredError(APIError):
    def __init__(self, detail: str = "Admin privileges required"):
        super().__init__(status.HTTP_403_FORBIDDEN, ErrorCode.ADMIN_REQUIRED, detail)


class EmailNotVerifiedError(APIError):
    def __init__(self, email: str, detail: str = "Email verification required"):
        super().__init__(status.HTTP_403_FORBIDDEN, ErrorCode.EMAIL_NOT_VERIFIED, detail, extra={"email": email})


class ForbiddenError(APIError):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status.HTTP_403_FORBIDDEN, ErrorCode.FORBIDDEN, detail)


class UserAlreadyExistsError(APIError):
    def __init__(self, detail: str = "User with this email already exists"):
        super().__init__(status.HTTP_409_CONFLICT, ErrorCode.USER_EXISTS, detail)


class RateLimitExceededError(APIError):
    def __init__(self, retry_after: int, limit: int, window_seconds: int, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status.HTTP_429_TOO_MANY_REQUESTS,
            ErrorCode.RATE_LIMITED,
            f"Rate limit exceeded. Try again in {retry_after} seconds.",
            extra={"retryAfter": retry_after, "limit": limit, "windowSeconds": window_seconds},
            headers={**(headers or {}), "Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class InternalServerError(APIError):
    def __init__(self, detail: str = "An internal error occurred. Please try again."):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, detail)
