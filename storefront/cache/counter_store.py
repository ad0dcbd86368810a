"""Fixed-window counter stores used by the rate limiter.

`MemoryCounterStore` keeps windows in process memory: counts are lost on
restart and are not shared between instances. Deployments running several
workers should point `RATE_LIMIT_BACKEND=redis` at a shared Redis so every
instance sees the same counters.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging
import threading

from redis import asyncio as aioredis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowState:
    count: int
    reset_at: float  # epoch seconds


class MemoryCounterStore:
    backend = "memory"

    def __init__(self, cleanup_interval: float = 300.0):
        self._windows: Dict[str, WindowState] = {}
        # Starlette may run dependencies from several threads
        self._lock = threading.Lock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = 0.0

    async def increment(self, key: str, window_seconds: float, now: float) -> WindowState:
        with self._lock:
            self._cleanup(now)
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                window = WindowState(count=0, reset_at=now + window_seconds)
            window = WindowState(count=window.count + 1, reset_at=window.reset_at)
            self._windows[key] = window
            return window

    async def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    async def stats(self, now: float) -> List[dict]:
        with self._lock:
            return [
                {"key": key, "requests": window.count, "resetAt": window.reset_at}
                for key, window in self._windows.items()
                if window.reset_at > now
            ]

    async def close(self) -> None:
        with self._lock:
            self._windows.clear()

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        expired = [key for key, window in self._windows.items() if window.reset_at <= now]
        for key in expired:
            del self._windows[key]
        if expired:
            logger.debug(f"Rate limiter cleanup: dropped {len(expired)}, {len(self._windows)} active")


class RedisCounterStore:
    backend = "redis"

    def __init__(self, redis_url: Optional[str] = None, prefix: str = "ratelimit:", client: Optional[aioredis.Redis] = None):
        self.redis_url = redis_url
        self.prefix = prefix
        self.redis: Optional[aioredis.Redis] = client

    async def connect(self) -> aioredis.Redis:
        if not self.redis:
            self.redis = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("Connected to Redis rate limit store.")
        return self.redis

    async def increment(self, key: str, window_seconds: float, now: float) -> WindowState:
        redis = await self.connect()
        redis_key = f"{self.prefix}{key}"
        async with redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            # NX: only the first hit of a window sets its lifetime
            pipe.pexpire(redis_key, int(window_seconds * 1000), nx=True)
            pipe.pttl(redis_key)
            count, _, ttl_ms = await pipe.execute()

        remaining = ttl_ms / 1000 if ttl_ms and ttl_ms > 0 else window_seconds
        return WindowState(count=int(count), reset_at=now + remaining)

    async def reset(self, key: str) -> None:
        redis = await self.connect()
        await redis.delete(f"{self.prefix}{key}")

    async def stats(self, now: float) -> List[dict]:
        redis = await self.connect()
        entries = []
        async for redis_key in redis.scan_iter(match=f"{self.prefix}*"):
            count = await redis.get(redis_key)
            ttl_ms = await redis.pttl(redis_key)
            if count is None or ttl_ms is None or ttl_ms <= 0:
                continue
            entries.append(
                {
                    "key": redis_key[len(self.prefix):],
                    "requests": int(count),
                    "resetAt": now + ttl_ms / 1000,
                }
            )
        return entries

    async def close(self) -> None:
        if self.redis:
            await self.redis.aclose()
            self.redis = None
