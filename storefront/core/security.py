import hashlib
import secrets
from functools import lru_cache

from passlib.context import CryptContext
from passlib.hash import argon2
from storefront.core.config import settings

SESSION_TOKEN_BYTES = 32  # 256-bit bearer tokens

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__rounds=settings.PASSWORD_HASH_ROUNDS,
    argon2__memory_cost=settings.PASSWORD_HASH_MEMORY_KIB,
)


def hash_password(password: str) -> str:
    if not password or not isinstance(password, str):
        raise ValueError("Password must be a non-empty string")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    if not isinstance(plain_password, str):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


def needs_rehash(hashed_password: str, target_rounds: int = settings.PASSWORD_HASH_ROUNDS) -> bool:
    """True when the hash's embedded time cost is below `target_rounds`.

    Anything that does not parse as an argon2 hash is reported as needing an
    upgrade; the caller only acts on it after a successful verify.
    """
    try:
        return argon2.from_string(hashed_password).rounds < target_rounds
    except (ValueError, TypeError):
        return True


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash to verify against when the account does not exist, so the
    unknown-email path costs the same as a wrong password."""
    return hash_password(secrets.token_urlsafe(16))


def generate_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
