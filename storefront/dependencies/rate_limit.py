"""Fixed-window per-client rate limiting for the auth boundary.

Each policy owns one limiter; routes opt in with `Depends(RateLimit(policy))`.
Limiters live on `app.state.rate_limiters` so tests and multiple app
instances never share counters through module globals.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Union
import logging
import math
import time

from fastapi import Request, Response

from storefront.cache.counter_store import MemoryCounterStore, RedisCounterStore
from storefront.core.config import settings
from storefront.core.constants import RateLimitPolicy
from storefront.utils.errors import RateLimitExceededError
from storefront.utils.helpers import get_client_ip

logger = logging.getLogger(__name__)

CounterStore = Union[MemoryCounterStore, RedisCounterStore]


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int = 0

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(math.ceil(self.reset_at))),
        }


class FixedWindowRateLimiter:
    def __init__(self, store: CounterStore, window_seconds: float, max_requests: int, name: str = "default"):
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("Rate limit window and request budget must be positive")
        self.store = store
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.name = name

    async def hit(self, key: str, now: Optional[float] = None) -> RateLimitDecision:
        """Count one request for `key` and decide whether it may proceed."""
        now = time.time() if now is None else now
        window = await self.store.increment(f"{self.name}:{key}", self.window_seconds, now)

        if window.count > self.max_requests:
            retry_after = max(1, math.ceil(window.reset_at - now))
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_at=window.reset_at,
                retry_after=retry_after,
            )

        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - window.count,
            reset_at=window.reset_at,
        )

    async def reset(self, key: str) -> None:
        await self.store.reset(f"{self.name}:{key}")


def build_rate_limit_store(config) -> CounterStore:
    if config.RATE_LIMIT_BACKEND.lower() == "redis":
        return RedisCounterStore(config.REDIS_URL)
    return MemoryCounterStore(cleanup_interval=config.RATE_LIMIT_CLEANUP_SECONDS)


def build_rate_limiters(config, store: CounterStore) -> Dict[RateLimitPolicy, FixedWindowRateLimiter]:
    return {
        RateLimitPolicy.AUTH: FixedWindowRateLimiter(
            store,
            config.RATE_LIMIT_AUTH_PERIOD_SECONDS,
            config.RATE_LIMIT_AUTH_REQUESTS,
            name=RateLimitPolicy.AUTH.value,
        ),
        RateLimitPolicy.USER: FixedWindowRateLimiter(
            store,
            config.RATE_LIMIT_USER_PERIOD_SECONDS,
            config.RATE_LIMIT_USER_REQUESTS,
            name=RateLimitPolicy.USER.value,
        ),
        RateLimitPolicy.PUBLIC: FixedWindowRateLimiter(
            store,
            config.RATE_LIMIT_PUBLIC_PERIOD_SECONDS,
            config.RATE_LIMIT_PUBLIC_REQUESTS,
            name=RateLimitPolicy.PUBLIC.value,
        ),
    }


class RateLimit:
    """Dependency enforcing one policy for the calling client address."""

    def __init__(self, policy: RateLimitPolicy):
        self.policy = policy

    async def __call__(self, request: Request, response: Response) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        limiter: FixedWindowRateLimiter = request.app.state.rate_limiters[self.policy]
        client_ip = get_client_ip(request, trust_forwarded=settings.TRUST_PROXY_HEADERS)

        try:
            decision = await limiter.hit(client_ip)
        except Exception:
            # Counter store outage: let the request through
            logger.exception(f"Rate limit store failed for policy {self.policy.value}")
            return

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded: policy={self.policy.value} client={client_ip}")
            raise RateLimitExceededError(
                retry_after=decision.retry_after,
                limit=decision.limit,
                window_seconds=int(limiter.window_seconds),
                headers=decision.headers(),
            )

        # Error responses are built fresh by the exception handlers
        request.state.rate_limit_headers = decision.headers()
        response.headers.update(decision.headers())


auth_rate_limit = RateLimit(RateLimitPolicy.AUTH)
user_rate_limit = RateLimit(RateLimitPolicy.USER)
public_rate_limit = RateLimit(RateLimitPolicy.PUBLIC)
