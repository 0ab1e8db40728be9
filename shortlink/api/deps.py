"""
FastAPI dependencies

Wires the per-application resources into request-scoped services and
resolves the authenticated user from the session cookie.
"""

from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.core.exceptions import AuthenticationError
from shortlink.core.resources import AppResources
from shortlink.core.setting import Settings
from shortlink.db.session import get_session
from shortlink.services.auth_service import AuthService
from shortlink.services.cache import URLCache
from shortlink.services.url_service import URLShorteningService


class CurrentUser(BaseModel):
    """Identity taken from a verified session token."""
    id: int
    email: str
    role: str


def get_resources(request: Request) -> AppResources:
    return request.app.state.resources


def get_settings(resources: AppResources = Depends(get_resources)) -> Settings:
    return resources.settings


def get_url_cache(resources: AppResources = Depends(get_resources)) -> URLCache:
    return URLCache(
        resources.redis,
        redirect_ttl=resources.settings.REDIRECT_CACHE_TTL,
        user_urls_ttl=resources.settings.USER_URLS_CACHE_TTL,
    )


def get_url_service(
    session: AsyncSession = Depends(get_session),
    resources: AppResources = Depends(get_resources),
    cache: URLCache = Depends(get_url_cache),
) -> URLShorteningService:
    return URLShorteningService(
        session,
        generator=resources.generator,
        cache=cache,
        base_url=resources.settings.BASE_URL,
        max_attempts=resources.settings.SHORT_CODE_MAX_ATTEMPTS,
    )


def get_auth_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        session,
        jwt_secret=settings.JWT_SECRET,
        jwt_expires_minutes=settings.JWT_EXPIRES_MINUTES,
        jwt_algorithm=settings.JWT_ALGORITHM,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
    auth_service: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """
    Verify the session cookie.

    Raises:
        AuthenticationError: Missing, invalid or expired token; the
            reason is never exposed to the caller
    """
    token = request.cookies.get(settings.JWT_COOKIE_NAME)
    if not token:
        raise AuthenticationError()

    payload = auth_service.verify_token(token)
    return CurrentUser(id=payload.user_id, email=payload.email, role=payload.role)
