"""
Test doubles for the cache client and the short code generator.
"""

import time
from typing import Optional


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis (decode_responses=True)."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.expires_at: dict[str, float] = {}

    async def get(self, key: str) -> Optional[str]:
        expires_at = self.expires_at.get(key)
        if expires_at is not None and expires_at <= time.monotonic():
            self.store.pop(key, None)
            self.expires_at.pop(key, None)
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        self.expires_at[key] = time.monotonic() + ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.expires_at.pop(key, None)
        return removed

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


class SequenceGenerator:
    """Generator double returning a fixed sequence of codes."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self) -> str:
        self.calls += 1
        if len(self.codes) > 1:
            return self.codes.pop(0)
        return self.codes[0]
