import pytest
from starlette.requests import Request

from storefront.core.config import settings
from storefront.utils.cookies import (
    build_cleared_session_cookie,
    build_session_cookie,
    is_valid_token_format,
    read_session_token,
)


def _request(cookie_header=None):
    headers = [(b"cookie", cookie_header.encode("latin-1"))] if cookie_header else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def test_session_cookie_attributes():
    header = build_session_cookie("a" * 64, 3600)
    parts = header.split("; ")

    assert parts[0] == f"eterno_session={'a' * 64}"
    assert {"HttpOnly", "SameSite=Strict", "Path=/", "Max-Age=3600", "Partitioned"} <= set(parts)
    assert "Secure" not in parts


def test_secure_only_in_production(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "production")

    assert "Secure" in build_session_cookie("a" * 64, 60).split("; ")


def test_cookie_domain(monkeypatch):
    monkeypatch.setattr(settings, "COOKIE_DOMAIN", ".example.com")

    assert "Domain=.example.com" in build_session_cookie("a" * 64, 60).split("; ")


def test_cleared_cookie_mirrors_attributes():
    cleared = build_cleared_session_cookie().split("; ")
    issued = build_session_cookie("a" * 64, 3600).split("; ")

    assert cleared[0] == "eterno_session="
    assert "Max-Age=0" in cleared
    assert set(cleared[1:]) - {"Max-Age=0"} == set(issued[1:]) - {"Max-Age=3600"}


@pytest.mark.parametrize(
    "token, valid",
    [
        ("a" * 64, True),
        ("A-b_c" * 4, True),
        ("short", False),
        ("a" * 129, False),
        ("has space in it!", False),
        ("", False),
        (None, False),
    ],
)
def test_token_format(token, valid):
    assert is_valid_token_format(token) is valid


def test_read_session_token():
    token = "b" * 64

    assert read_session_token(_request(f"eterno_session={token}; theme=dark")) == token
    assert read_session_token(_request("theme=dark")) is None
    assert read_session_token(_request("eterno_session=bad")) is None
    assert read_session_token(_request()) is None
