import re

import pytest
from passlib.hash import argon2

from storefront.core.security import (
    dummy_password_hash,
    generate_session_token,
    hash_password,
    hash_token,
    needs_rehash,
    verify_password,
)


def test_hash_and_verify():
    hashed = hash_password("Correct-Horse-9")

    assert hashed.startswith("$argon2")
    assert hashed != hash_password("Correct-Horse-9")
    assert verify_password("Correct-Horse-9", hashed) is True
    assert verify_password("correct-horse-9", hashed) is False


@pytest.mark.parametrize("plain, hashed", [("", "$argon2id$x"), ("secret", ""), ("secret", "not-a-hash"), (None, None)])
def test_verify_never_raises(plain, hashed):
    assert verify_password(plain, hashed) is False


def test_hash_rejects_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_needs_rehash_compares_time_cost():
    cheap = argon2.using(rounds=1, memory_cost=1024).hash("Secret-Passw0rd")

    assert needs_rehash(cheap, target_rounds=1) is False
    assert needs_rehash(cheap, target_rounds=2) is True


def test_needs_rehash_for_foreign_hash():
    assert needs_rehash("$2b$12$invalidbcryptstuff", target_rounds=1) is True


def test_dummy_hash_is_stable_and_never_matches():
    assert dummy_password_hash() == dummy_password_hash()
    assert verify_password("anything", dummy_password_hash()) is False


def test_session_tokens():
    token = generate_session_token()

    assert re.fullmatch(r"[0-9a-f]{64}", token)
    assert token != generate_session_token()
    assert hash_token(token) == hash_token(token)
    assert hash_token(token) != token
    assert len(hash_token(token)) == 64
