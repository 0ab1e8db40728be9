"""
URL Cache (cache-aside)

Redis-backed cache in front of the database for:
- Redirect lookups:  url:<short_code>     -> long URL       (REDIRECT_CACHE_TTL)
- Per-user listings: user_urls:<owner_id> -> JSON list      (USER_URLS_CACHE_TTL)

The cache is advisory. Every Redis failure is logged and reported to the
caller as a miss (reads) or ignored (writes/invalidation); the database stays
authoritative and stale entries expire at their TTL.

invalidate() is the single invalidation entry point. It is called by the
two mutating operations (create and delete) of the URL service.
"""

import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis

logger = logging.getLogger(__name__)

REDIRECT_KEY_PREFIX = "url"
USER_URLS_KEY_PREFIX = "user_urls"


def redirect_key(short_code: str) -> str:
    return f"{REDIRECT_KEY_PREFIX}:{short_code}"


def user_urls_key(owner_id: Any) -> str:
    return f"{USER_URLS_KEY_PREFIX}:{owner_id}"


class URLCache:
    """
    Cache-aside policy over an optional async Redis client.

    With client=None every read is a miss and every write is a no-op,
    so services never need to branch on whether caching is configured.
    """

    def __init__(
        self,
        client: Optional[Redis] = None,
        redirect_ttl: int = 3600,
        user_urls_ttl: int = 300,
    ):
        self.client = client
        self.redirect_ttl = redirect_ttl
        self.user_urls_ttl = user_urls_ttl

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def get_long_url(self, short_code: str) -> Optional[str]:
        if not self.enabled:
            return None
        try:
            value = await self.client.get(redirect_key(short_code))
        except Exception as e:
            logger.warning(f"Cache read failed for {short_code}: {e}")
            return None

        if value is None:
            logger.debug(f"Cache miss for short code: {short_code}")
            return None

        logger.debug(f"Cache hit for short code: {short_code}")
        return value.decode() if isinstance(value, bytes) else value

    async def set_long_url(self, short_code: str, long_url: str) -> None:
        if not self.enabled:
            return
        try:
            await self.client.setex(redirect_key(short_code), self.redirect_ttl, long_url)
        except Exception as e:
            logger.warning(f"Cache write failed for {short_code}: {e}")

    async def get_user_urls(self, owner_id: Any) -> Optional[list[dict]]:
        if not self.enabled:
            return None
        try:
            value = await self.client.get(user_urls_key(owner_id))
        except Exception as e:
            logger.warning(f"Cache read failed for user {owner_id} listing: {e}")
            return None

        if value is None:
            return None

        try:
            urls = json.loads(value)
        except ValueError:
            logger.warning(f"Discarding corrupt cached listing for user {owner_id}")
            return None
        return urls if isinstance(urls, list) else None

    async def set_user_urls(self, owner_id: Any, urls: list[dict]) -> None:
        if not self.enabled:
            return
        try:
            await self.client.setex(
                user_urls_key(owner_id),
                self.user_urls_ttl,
                json.dumps(urls, default=str),
            )
        except Exception as e:
            logger.warning(f"Cache write failed for user {owner_id} listing: {e}")

    async def invalidate(self, owner_id: Any, short_code: Optional[str] = None) -> None:
        """
        Drop the owner's cached listing and, if given, the redirect entry.

        Args:
            owner_id: Owner whose listing changed (None skips the listing key)
            short_code: Short code whose redirect must not be served anymore
        """
        if not self.enabled:
            return

        keys = []
        if owner_id is not None:
            keys.append(user_urls_key(owner_id))
        if short_code:
            keys.append(redirect_key(short_code))
        if not keys:
            return

        try:
            await self.client.delete(*keys)
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {keys}: {e}")

    async def ping(self) -> bool:
        """True if Redis answers, False when it fails or is not configured."""
        if not self.enabled:
            return False
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.warning(f"Cache ping failed: {e}")
            return False
