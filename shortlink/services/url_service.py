"""
URL Shortening Service

This service handles the core business logic for URL shortening:
- Validating URLs
- De-duplicating by (long URL, owner)
- Generating short codes and retrying on collisions
- Cache-aside lookups for redirects and per-user listings
- Owner-only deletion

Design Decisions:
- Random salted codes: unpredictable, no shared counter between instances
- The unique index on short_code is the only uniqueness guarantee; the insert
  reports CREATED or CONFLICT and the loop retries with a fresh code on CONFLICT
- Any other persistence failure aborts immediately
- Cache errors never fail a request (see URLCache)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.core.exceptions import (
    DatabaseError,
    GenerationExhaustedError,
    InsertOutcome,
    NotFoundError,
    ValidationError,
)
from shortlink.core.validators import is_valid_url
from shortlink.db.models import ShortURL
from shortlink.services.cache import URLCache
from shortlink.services.short_code import ShortCodeGenerator

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10

INVALID_URL_MESSAGE = "Invalid URL format. URL must start with http:// or https://"
NOT_FOUND_MESSAGE = "Short URL not found"
EXHAUSTED_MESSAGE = "Failed to generate unique short code after maximum attempts"


def _is_short_code_conflict(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed: short_urls.short_code"
    # postgres: duplicate key value violates unique constraint "ix_short_urls_short_code"
    return "short_code" in str(error.orig)


def short_url_to_cache(short_url: ShortURL) -> dict:
    return {
        "id": short_url.id,
        "short_code": short_url.short_code,
        "long_url": short_url.long_url,
        "created_at": short_url.created_at.isoformat(),
        "owner_id": short_url.owner_id,
    }


def short_url_from_cache(data: dict) -> ShortURL:
    created_at = datetime.fromisoformat(data["created_at"])
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return ShortURL(
        id=data.get("id"),
        short_code=data["short_code"],
        long_url=data["long_url"],
        created_at=created_at,
        owner_id=data.get("owner_id"),
    )


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Separated from API layer for testability and maintainability.
    """

    def __init__(
        self,
        session: AsyncSession,
        generator: ShortCodeGenerator,
        cache: Optional[URLCache] = None,
        base_url: str = "",
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initialize the URL shortening service.

        Args:
            session: Database session
            generator: Short code generator
            cache: Cache-aside policy (a disabled URLCache when omitted)
            base_url: Public base URL used to build short links
            max_attempts: Collision retries before giving up
        """
        self.session = session
        self.generator = generator
        self.cache = cache or URLCache()
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts

    async def get_existing_short_url(
        self, long_url: str, owner_id: Optional[int] = None
    ) -> Optional[ShortURL]:
        """
        Find a mapping the same owner already created for this URL.
        """
        statement = select(ShortURL).where(ShortURL.long_url == long_url)
        if owner_id is None:
            statement = statement.where(ShortURL.owner_id.is_(None))
        else:
            statement = statement.where(ShortURL.owner_id == owner_id)
        result = await self.session.execute(statement.order_by(ShortURL.id).limit(1))
        return result.scalars().first()

    async def shorten_url(self, long_url: str, owner_id: Optional[int] = None) -> ShortURL:
        """
        Create a new short URL or return the owner's existing one.

        Args:
            long_url: The long URL to shorten
            owner_id: Id of the user creating the mapping

        Returns:
            ShortURL object with short_code populated

        Raises:
            ValidationError: If URL format is invalid
            GenerationExhaustedError: If every attempt collided
            DatabaseError: If database operation fails
        """
        if not is_valid_url(long_url):
            raise ValidationError(INVALID_URL_MESSAGE)
        long_url = long_url.strip()

        existing_short_url = await self.get_existing_short_url(long_url, owner_id)
        if existing_short_url:
            return existing_short_url

        for attempt in range(1, self.max_attempts + 1):
            short_code = self.generator.generate()
            outcome, short_url = await self._insert_short_url(short_code, long_url, owner_id)

            if outcome is InsertOutcome.CREATED:
                await self.cache.invalidate(owner_id, short_code)
                logger.info(f"Created short code {short_code} for owner {owner_id}")
                return short_url

            logger.info(
                f"Short code collision on {short_code} "
                f"(attempt {attempt}/{self.max_attempts})"
            )

        logger.error(f"Short code generation exhausted after {self.max_attempts} attempts")
        raise GenerationExhaustedError(EXHAUSTED_MESSAGE)

    async def _insert_short_url(
        self, short_code: str, long_url: str, owner_id: Optional[int]
    ) -> tuple[InsertOutcome, Optional[ShortURL]]:
        """
        Try to claim a short code.

        Returns:
            (CREATED, row) on success, (CONFLICT, None) if the code is taken

        Raises:
            DatabaseError: For every failure other than a short code conflict
        """
        short_url = ShortURL(short_code=short_code, long_url=long_url, owner_id=owner_id)
        self.session.add(short_url)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_short_code_conflict(e):
                return InsertOutcome.CONFLICT, None
            raise DatabaseError(
                "Failed to create short URL: database constraint violation",
                original_error=e
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to create short URL: {e}", original_error=e)

        return InsertOutcome.CREATED, short_url

    async def get_original_url(self, short_code: str) -> Optional[ShortURL]:
        """
        Retrieve the mapping for a given short code straight from the database.
        """
        statement = select(ShortURL).where(ShortURL.short_code == short_code)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_long_url(self, short_code: str) -> str:
        """
        Resolve a short code for redirection.

        Raises:
            NotFoundError: If the short code does not exist
        """
        cached = await self.cache.get_long_url(short_code)
        if cached:
            return cached

        short_url = await self.get_original_url(short_code)
        if short_url is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        await self.cache.set_long_url(short_code, short_url.long_url)
        return short_url.long_url

    async def list_urls_for_user(self, owner_id: int) -> list[ShortURL]:
        """
        All mappings owned by a user, newest first.
        """
        cached = await self.cache.get_user_urls(owner_id)
        if cached is not None:
            try:
                return [short_url_from_cache(item) for item in cached]
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring malformed cached listing for user {owner_id}: {e}")

        statement = (
            select(ShortURL)
            .where(ShortURL.owner_id == owner_id)
            .order_by(ShortURL.created_at.desc(), ShortURL.id.desc())
        )
        result = await self.session.execute(statement)
        urls = list(result.scalars().all())

        await self.cache.set_user_urls(owner_id, [short_url_to_cache(url) for url in urls])
        return urls

    async def delete_url_for_user(self, owner_id: int, short_code: str) -> None:
        """
        Delete a mapping owned by the user.

        Raises:
            NotFoundError: If the code does not exist or belongs to someone else
        """
        statement = delete(ShortURL).where(
            ShortURL.short_code == short_code,
            ShortURL.owner_id == owner_id,
        )
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to delete short URL: {e}", original_error=e)

        if result.rowcount == 0:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        await self.cache.invalidate(owner_id, short_code)
        logger.info(f"Deleted short code {short_code} for owner {owner_id}")

    async def count_urls(self) -> int:
        result = await self.session.execute(select(func.count(ShortURL.id)))
        return result.scalar() or 0

    def to_response(self, short_url: ShortURL) -> dict[str, Any]:
        """
        Public representation of a mapping.
        """
        return {
            "shortUrl": f"{self.base_url}/{short_url.short_code}",
            "shortCode": short_url.short_code,
            "longUrl": short_url.long_url,
            "created_at": short_url.created_at,
        }
