"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models accept missing fields so the endpoints can answer with
  specific 400 messages instead of generic validation errors
- Response models use the camelCase keys the frontend consumes
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: Optional[str] = Field(default=None, description="The long URL to shorten")


class ShortenResponse(BaseModel):
    """Response model for a single short URL."""
    model_config = ConfigDict(populate_by_name=True)

    short_url: str = Field(..., alias="shortUrl", description="The complete short URL")
    short_code: str = Field(..., alias="shortCode", description="The generated short code")
    long_url: str = Field(..., alias="longUrl", description="The original long URL")
    created_at: datetime


class URLListResponse(BaseModel):
    urls: list[ShortenResponse]


class CredentialsRequest(BaseModel):
    """Body of the register and login endpoints."""
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """A user without its password hash."""
    id: int
    email: str
    role: str
    created_at: Optional[datetime] = None


class UserEnvelope(BaseModel):
    user: UserResponse


class LogoutResponse(BaseModel):
    success: bool = True


class DashboardSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_urls: int = Field(..., alias="totalUrls")
    user: UserResponse

