"""Application constants such as account statuses and rate limit policies."""
from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class RateLimitPolicy(str, Enum):
    AUTH = "auth"
    USER = "user"
    PUBLIC = "public"
