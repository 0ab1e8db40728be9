"""
Authentication Endpoints

Register, login, logout and "who am I". The session token travels in an
HttpOnly cookie; its 1-day Max-Age is independent of the shorter expiry
embedded in the token itself.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from shortlink.api.deps import CurrentUser, get_auth_service, get_current_user, get_settings
from shortlink.api.schemas import CredentialsRequest, LogoutResponse, UserEnvelope
from shortlink.core.exceptions import AuthenticationError, ValidationError
from shortlink.core.rate_limit import RATE_LIMITS, limiter
from shortlink.core.setting import Settings
from shortlink.core.validators import validate_credentials
from shortlink.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.JWT_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.JWT_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
@limiter.limit(RATE_LIMITS["register"])
async def register(
    request: Request,
    body: CredentialsRequest,
    settings: Settings = Depends(get_settings),
    auth_service: AuthService = Depends(get_auth_service),
) -> dict:
    """
    Raises:
        ValidationError 400: missing fields, bad email, password < 8 chars
        DuplicateUserError 400: email already registered
    """
    validate_credentials(body.email, body.password)
    user = await auth_service.register_user(
        body.email, body.password, role=settings.DEFAULT_USER_ROLE
    )
    return {"user": user}


@router.post(
    "/login",
    response_model=UserEnvelope,
    summary="Log in and receive the session cookie",
)
@limiter.limit(RATE_LIMITS["login"])
async def login(
    request: Request,
    response: Response,
    body: CredentialsRequest,
    settings: Settings = Depends(get_settings),
    auth_service: AuthService = Depends(get_auth_service),
) -> dict:
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    user = await auth_service.validate_user(body.email, body.password)
    if user is None:
        logger.info("Login rejected")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    token = auth_service.generate_token(user)
    set_auth_cookie(response, token, settings)
    return {"user": user.to_safe_dict()}


@router.post("/logout", response_model=LogoutResponse, summary="Clear the session cookie")
async def logout(response: Response, settings: Settings = Depends(get_settings)) -> dict:
    clear_auth_cookie(response, settings)
    return {"success": True}


@router.get("/me", response_model=UserEnvelope, summary="Current user")
async def me(current_user: CurrentUser = Depends(get_current_user)) -> dict:
    return {"user": current_user.model_dump()}
