"""
FastAPI Endpoints for URL Shortener Service

This module defines the URL REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Authentication (session cookie dependency)
- Delegating to service layer

Error translation to HTTP codes lives in shortlink.api.errors.

Two routers are exported:
- router: authenticated /api/... endpoints
- redirect_router: the public catch-all GET /{short_code}, which must be
  included after every other route
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from shortlink.api.deps import CurrentUser, get_current_user, get_url_service
from shortlink.api.schemas import (
    DashboardSummaryResponse,
    ShortenRequest,
    ShortenResponse,
    URLListResponse,
)
from shortlink.core.exceptions import NotFoundError, ValidationError
from shortlink.core.rate_limit import RATE_LIMITS, limiter
from shortlink.core.validators import sanitize_short_code
from shortlink.services.url_service import NOT_FOUND_MESSAGE, URLShorteningService

router = APIRouter(prefix="/api")

redirect_router = APIRouter()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and returns a shortened version with a unique code"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    current_user: CurrentUser = Depends(get_current_user),
    url_service: URLShorteningService = Depends(get_url_service),
) -> dict:
    """
    Create a new short URL from a long URL.

    Submitting the same URL again returns the caller's existing short URL.
    """
    if not body.url:
        raise ValidationError("URL is required in the request body")

    short_url = await url_service.shorten_url(body.url, owner_id=current_user.id)
    return url_service.to_response(short_url)


@router.get(
    "/urls",
    response_model=URLListResponse,
    summary="List the caller's short URLs",
)
async def list_urls(
    current_user: CurrentUser = Depends(get_current_user),
    url_service: URLShorteningService = Depends(get_url_service),
) -> dict:
    urls = await url_service.list_urls_for_user(current_user.id)
    return {"urls": [url_service.to_response(url) for url in urls]}


@router.delete(
    "/urls/{short_code}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one of the caller's short URLs",
)
async def delete_url(
    short_code: str,
    current_user: CurrentUser = Depends(get_current_user),
    url_service: URLShorteningService = Depends(get_url_service),
) -> Response:
    """
    Unknown codes and codes owned by someone else both answer 404.
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    await url_service.delete_url_for_user(current_user.id, sanitized_code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/dashboard/summary",
    response_model=DashboardSummaryResponse,
    summary="Dashboard totals for the logged-in user",
)
async def dashboard_summary(
    current_user: CurrentUser = Depends(get_current_user),
    url_service: URLShorteningService = Depends(get_url_service),
) -> dict:
    total_urls = await url_service.count_urls()
    return {"totalUrls": total_urls, "user": current_user.model_dump()}


@redirect_router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    url_service: URLShorteningService = Depends(get_url_service),
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Raises:
        HTTPException 400: If short code format is invalid
        NotFoundError 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Invalid short code format: '{short_code}'. "
                "Short codes must be 4-8 alphanumeric characters."
            )
        )

    long_url = await url_service.get_long_url(sanitized_code)

    return RedirectResponse(
        url=long_url,
        status_code=status.HTTP_302_FOUND
    )
