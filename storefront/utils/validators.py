"""Input shape checks shared by the auth controllers."""
import re
from typing import Iterable, List, Mapping

from pydantic import EmailStr, TypeAdapter, ValidationError

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
PHONE_MAX_LENGTH = 20

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(value: str) -> bool:
    if not value:
        return False
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_phone(value: str) -> bool:
    if not value or len(value) > PHONE_MAX_LENGTH:
        return False
    return bool(PHONE_PATTERN.match(value))


def find_missing(data: Mapping[str, object], required: Iterable[str]) -> List[str]:
    """Names from `required` whose value is absent, None or blank."""
    missing = []
    for name in required:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing
