"""Session cookie transport.

The Set-Cookie value is assembled by hand because the fixed posture includes
`Partitioned`, which `http.cookies` (and therefore `Response.set_cookie`) only
understands on recent interpreters.
"""
import re
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from storefront.core.config import settings

_TOKEN_FORMAT = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def cookie_name() -> str:
    return settings.SESSION_COOKIE_NAME


def build_session_cookie(token: str, max_age: int) -> str:
    """Set-Cookie header value carrying `token` for `max_age` seconds."""
    parts = [f"{cookie_name()}={token}", "HttpOnly"]
    if settings.is_production:
        parts.append("Secure")
    parts.extend(["SameSite=Strict", "Path=/", f"Max-Age={int(max_age)}"])
    if settings.COOKIE_DOMAIN:
        parts.append(f"Domain={settings.COOKIE_DOMAIN}")
    parts.append("Partitioned")
    return "; ".join(parts)


def build_cleared_session_cookie() -> str:
    # Same name and attributes, otherwise the browser keeps the issued one
    return build_session_cookie("", 0)


def set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.headers.append("set-cookie", build_session_cookie(token, max_age))


def clear_session_cookie(response: Response) -> None:
    response.headers.append("set-cookie", build_cleared_session_cookie())


def is_valid_token_format(token: Optional[str]) -> bool:
    return bool(token) and bool(_TOKEN_FORMAT.match(token))


def has_session_cookie(request: Request) -> bool:
    return cookie_name() in request.cookies


def read_session_token(request: Request) -> Optional[str]:
    """Token from the request's cookie header, or None when absent or malformed."""
    token = request.cookies.get(cookie_name())
    if not is_valid_token_format(token):
        return None
    return token
