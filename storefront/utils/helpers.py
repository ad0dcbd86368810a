"""Helper utilities (clock, responses, request helpers)."""
from datetime import datetime, timezone

from fastapi import Request


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_response(success=True, **data):
    return {"success": success, **data}


def get_client_ip(request: Request, trust_forwarded: bool = False) -> str:
    """Return client's IP address from request headers or connection info.

    `X-Forwarded-For` (comma-separated, first hop wins) is only honoured when
    `trust_forwarded` is set, i.e. when the app runs behind a proxy that
    overwrites it. Falls back to `request.client.host`, then 'unknown'.
    """
    if trust_forwarded:
        x_forwarded_for = request.headers.get("x-forwarded-for")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()

    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return client.host

    return "unknown"
