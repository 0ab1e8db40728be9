"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path, so tests never share
rows. Redis is replaced by FakeRedis, an in-memory double of the few async
commands URLCache uses.
"""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from shortlink.core.setting import EnvSettingsOptions, Settings
from shortlink.db import models  # noqa: F401
from shortlink.db.session import create_session_maker
from shortlink.db.sqlite_adapter import get_database_adapter
from shortlink.main import create_app
from shortlink.services.cache import URLCache
from shortlink.services.short_code import ShortCodeGenerator

from doubles import FakeRedis

TEST_PASSWORD = "password123"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENV_SETTING=EnvSettingsOptions.development,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        REDIS_URL=None,
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        BASE_URL="http://short.test",
        HASH_ID_SALT="test-salt",
    )


@pytest.fixture
async def engine(test_settings):
    adapter = get_database_adapter(test_settings.database_url)
    engine = adapter.create_engine(test_settings.database_url)
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return create_session_maker(engine)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def generator() -> ShortCodeGenerator:
    return ShortCodeGenerator("test-salt")


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis) -> URLCache:
    return URLCache(fake_redis, redirect_ttl=3600, user_urls_ttl=300)


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as client:
        yield client


@pytest.fixture
def login_as(client):
    """Register (first time only) and log the test client in as the given email."""
    registered = set()

    def _login_as(email: str, password: str = TEST_PASSWORD) -> None:
        if email not in registered:
            response = client.post("/api/auth/register", json={"email": email, "password": password})
            assert response.status_code == 201, response.text
            registered.add(email)
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text

    return _login_as
