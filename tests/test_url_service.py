"""Tests for URLShorteningService against a real SQLite database."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import IntegrityError, OperationalError

from shortlink.core.exceptions import (
    DatabaseError,
    ErrorKind,
    GenerationExhaustedError,
    NotFoundError,
    ValidationError,
)
from shortlink.db.models import ShortURL
from shortlink.services.cache import URLCache, redirect_key, user_urls_key
from shortlink.services.url_service import URLShorteningService

from doubles import SequenceGenerator


@pytest.fixture
def url_service(session, generator, cache):
    return URLShorteningService(session, generator, cache=cache, base_url="http://short.test/")


class TestShortenURL:

    async def test_shorten_creates_mapping(self, url_service):
        short_url = await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert short_url.id is not None
        assert short_url.long_url == "https://example.com/page"
        assert short_url.owner_id == 1
        assert 4 <= len(short_url.short_code) <= 8

    async def test_shorten_trims_input(self, url_service):
        short_url = await url_service.shorten_url("  https://example.com/page  ", owner_id=1)
        assert short_url.long_url == "https://example.com/page"

    @pytest.mark.parametrize("long_url", ["not-a-url", "ftp://example.com", "", "javascript:alert(1)"])
    async def test_shorten_rejects_invalid_url(self, url_service, long_url):
        with pytest.raises(ValidationError) as exc_info:
            await url_service.shorten_url(long_url, owner_id=1)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert await url_service.count_urls() == 0

    async def test_same_owner_gets_existing_mapping(self, url_service):
        first = await url_service.shorten_url("https://example.com/page", owner_id=1)
        second = await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert second.short_code == first.short_code
        assert await url_service.count_urls() == 1

    async def test_different_owners_get_separate_mappings(self, url_service):
        first = await url_service.shorten_url("https://example.com/page", owner_id=1)
        second = await url_service.shorten_url("https://example.com/page", owner_id=2)

        assert second.short_code != first.short_code
        assert await url_service.count_urls() == 2

    async def test_collision_retries_with_fresh_code(self, session, cache):
        seeded = URLShorteningService(session, SequenceGenerator(["aaaa"]), cache=cache)
        await seeded.shorten_url("https://example.com/first", owner_id=1)

        generator = SequenceGenerator(["aaaa", "aaaa", "bbbb"])
        url_service = URLShorteningService(session, generator, cache=cache)
        short_url = await url_service.shorten_url("https://example.com/second", owner_id=1)

        assert short_url.short_code == "bbbb"
        assert generator.calls == 3
        assert await url_service.count_urls() == 2

    async def test_exhausted_attempts_raise(self, session, cache):
        seeded = URLShorteningService(session, SequenceGenerator(["aaaa"]), cache=cache)
        await seeded.shorten_url("https://example.com/first", owner_id=1)

        generator = SequenceGenerator(["aaaa"])
        url_service = URLShorteningService(session, generator, cache=cache, max_attempts=3)

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await url_service.shorten_url("https://example.com/second", owner_id=1)

        assert exc_info.value.kind is ErrorKind.GENERATION_EXHAUSTED
        assert generator.calls == 3
        assert await url_service.count_urls() == 1

    async def test_integrity_error_on_other_column_aborts(self, session, monkeypatch):
        error = IntegrityError(
            "INSERT INTO short_urls", {}, Exception("NOT NULL constraint failed: short_urls.long_url")
        )
        monkeypatch.setattr(session, "commit", AsyncMock(side_effect=error))
        generator = SequenceGenerator(["aaaa", "bbbb"])
        url_service = URLShorteningService(session, generator)

        with pytest.raises(DatabaseError) as exc_info:
            await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert exc_info.value.original_error is error
        assert generator.calls == 1

    async def test_operational_error_aborts(self, session, monkeypatch):
        error = OperationalError("INSERT INTO short_urls", {}, Exception("database is locked"))
        monkeypatch.setattr(session, "commit", AsyncMock(side_effect=error))
        generator = SequenceGenerator(["aaaa", "bbbb"])
        url_service = URLShorteningService(session, generator)

        with pytest.raises(DatabaseError):
            await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert generator.calls == 1

    async def test_create_invalidates_owner_listing(self, url_service, fake_redis):
        await url_service.list_urls_for_user(1)
        assert user_urls_key(1) in fake_redis.store

        await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert user_urls_key(1) not in fake_redis.store

    async def test_concurrent_creates_get_distinct_codes(self, session_maker, generator):
        async def create(index):
            async with session_maker() as session:
                url_service = URLShorteningService(session, generator)
                short_url = await url_service.shorten_url(f"https://example.com/{index}", owner_id=1)
                return short_url.short_code

        codes = await asyncio.gather(*(create(index) for index in range(5)))

        assert len(set(codes)) == 5


class TestRedirectLookup:

    async def test_unknown_code_raises_not_found(self, url_service):
        with pytest.raises(NotFoundError) as exc_info:
            await url_service.get_long_url("zzzz")
        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    async def test_returns_exact_long_url_and_populates_cache(self, url_service, fake_redis):
        long_url = "https://example.com/search?q=a+b&lang=en#results"
        short_url = await url_service.shorten_url(long_url, owner_id=1)

        assert await url_service.get_long_url(short_url.short_code) == long_url
        assert fake_redis.store[redirect_key(short_url.short_code)] == long_url

    async def test_cache_hit_skips_database(self, url_service, fake_redis):
        fake_redis.store[redirect_key("cach")] = "https://example.com/cached"
        assert await url_service.get_long_url("cach") == "https://example.com/cached"

    async def test_failing_cache_falls_back_to_database(self, session, generator):
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("down")
        client.setex.side_effect = RedisConnectionError("down")
        client.delete.side_effect = RedisConnectionError("down")
        url_service = URLShorteningService(session, generator, cache=URLCache(client))

        short_url = await url_service.shorten_url("https://example.com/page", owner_id=1)

        assert await url_service.get_long_url(short_url.short_code) == "https://example.com/page"


class TestListAndDelete:

    async def test_list_is_newest_first_and_owner_scoped(self, url_service):
        first = await url_service.shorten_url("https://example.com/1", owner_id=1)
        first_code = first.short_code
        second = await url_service.shorten_url("https://example.com/2", owner_id=1)
        second_code = second.short_code
        await url_service.shorten_url("https://example.com/other", owner_id=2)

        urls = await url_service.list_urls_for_user(1)

        assert [url.short_code for url in urls] == [second_code, first_code]

    async def test_list_served_from_cache(self, url_service, fake_redis):
        short_url = await url_service.shorten_url("https://example.com/1", owner_id=1)
        short_code = short_url.short_code
        await url_service.list_urls_for_user(1)
        assert user_urls_key(1) in fake_redis.store

        cached = await url_service.list_urls_for_user(1)

        assert [url.short_code for url in cached] == [short_code]
        assert url_service.to_response(cached[0])["shortUrl"] == f"http://short.test/{short_code}"

    async def test_created_at_is_utc_on_every_read(self, session_maker, generator, cache):
        async with session_maker() as session:
            url_service = URLShorteningService(session, generator, cache=cache)
            created = await url_service.shorten_url("https://example.com/1", owner_id=1)
            created_at = created.created_at

        async with session_maker() as session:
            url_service = URLShorteningService(session, generator, cache=cache)
            existing = await url_service.shorten_url("https://example.com/1", owner_id=1)
            listed = await url_service.list_urls_for_user(1)
            cached = await url_service.list_urls_for_user(1)

        assert created_at.tzinfo is not None
        for value in (existing.created_at, listed[0].created_at, cached[0].created_at):
            assert value == created_at
            assert value.utcoffset() == timedelta(0)

    async def test_list_empty_for_new_user(self, url_service):
        assert await url_service.list_urls_for_user(99) == []

    async def test_non_owner_cannot_delete(self, url_service):
        short_url = await url_service.shorten_url("https://example.com/1", owner_id=1)
        short_code = short_url.short_code

        with pytest.raises(NotFoundError):
            await url_service.delete_url_for_user(2, short_code)

        assert await url_service.get_long_url(short_code) == "https://example.com/1"

    async def test_delete_unknown_code(self, url_service):
        with pytest.raises(NotFoundError):
            await url_service.delete_url_for_user(1, "zzzz")

    async def test_owner_delete_removes_mapping_and_cache(self, url_service, fake_redis):
        short_url = await url_service.shorten_url("https://example.com/1", owner_id=1)
        short_code = short_url.short_code
        await url_service.get_long_url(short_code)
        await url_service.list_urls_for_user(1)

        await url_service.delete_url_for_user(1, short_code)

        assert redirect_key(short_code) not in fake_redis.store
        assert user_urls_key(1) not in fake_redis.store
        with pytest.raises(NotFoundError):
            await url_service.get_long_url(short_code)
        assert await url_service.list_urls_for_user(1) == []


def test_to_response_shape(generator):
    created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    url_service = URLShorteningService(session=None, generator=generator, base_url="http://short.test/")
    response = url_service.to_response(
        ShortURL(short_code="abcd", long_url="https://example.com", created_at=created_at)
    )

    assert response["shortUrl"] == "http://short.test/abcd"
    assert response["shortCode"] == "abcd"
    assert response["longUrl"] == "https://example.com"
    assert response["created_at"] == created_at
