"""Password strength rules shared by registration, password change and the
public strength-check endpoint.

Every rule is evaluated; errors accumulate in a fixed order so clients can
render them as a checklist. A blocklisted password is rejected outright and
scores zero regardless of its composition.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List

MIN_LENGTH = 8
LONG_LENGTH = 12
VERY_LONG_LENGTH = 16

ERROR_TOO_SHORT = f"Must be at least {MIN_LENGTH} characters"
ERROR_NO_UPPERCASE = "Must contain uppercase letter"
ERROR_NO_LOWERCASE = "Must contain lowercase letter"
ERROR_NO_DIGIT = "Must contain number"
ERROR_TOO_COMMON = "Password is too common"

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "12345678",
        "qwerty",
        "abc123",
        "password123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
        "1234567890",
    }
)

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")


class PasswordStrength(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


@dataclass(frozen=True)
class PasswordValidationResult:
    valid: bool
    strength: PasswordStrength
    score: int
    errors: List[str] = field(default_factory=list)


def strength_for_score(score: int) -> PasswordStrength:
    if score <= 3:
        return PasswordStrength.WEAK
    if score <= 5:
        return PasswordStrength.MEDIUM
    return PasswordStrength.STRONG


def validate_password_strength(password: str) -> PasswordValidationResult:
    password = password or ""
    errors: List[str] = []
    score = 0

    if len(password) < MIN_LENGTH:
        errors.append(ERROR_TOO_SHORT)
    else:
        score += 1
        if len(password) >= LONG_LENGTH:
            score += 1
        if len(password) >= VERY_LONG_LENGTH:
            score += 1

    if _UPPERCASE.search(password):
        score += 1
    else:
        errors.append(ERROR_NO_UPPERCASE)

    if _LOWERCASE.search(password):
        score += 1
    else:
        errors.append(ERROR_NO_LOWERCASE)

    if _DIGIT.search(password):
        score += 1
    else:
        errors.append(ERROR_NO_DIGIT)

    # Symbols are a bonus only
    if _SYMBOL.search(password):
        score += 1

    if password.lower() in COMMON_PASSWORDS:
        errors.append(ERROR_TOO_COMMON)
        score = 0

    return PasswordValidationResult(
        valid=not errors,
        strength=strength_for_score(score),
        score=score,
        errors=errors,
    )
