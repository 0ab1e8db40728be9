"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- User: Accounts allowed to create, list and delete short URLs
- ShortURL: Stores the mapping between short codes and original URLs

Design Decisions:
- Unique index on short_code: the only uniqueness the shortening loop relies on
- Indexes on created_at for newest-first listings
- Emails are stored lowercased so the unique index is case-insensitive
- Timestamps are always read back as timezone-aware UTC
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Column, Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    SQLite keeps no offset, so values are stored as UTC and read back
    with tzinfo=UTC attached.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class User(SQLModel, table=True):
    """
    Registered account.

    Fields:
    - id: Auto-incrementing primary key (token subject)
    - email: Normalized (trimmed, lowercased) unique email
    - password_hash: bcrypt hash, never leaves the service layer
    - role: admin or user
    - created_at: Registration time
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=Column(String(320), nullable=False, unique=True, index=True)
    )
    password_hash: str = Field(sa_column=Column(String(128), nullable=False))
    role: str = Field(
        default=UserRole.user.value,
        sa_column=Column(String(16), nullable=False, default=UserRole.user.value)
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False)
    )

    def to_safe_dict(self) -> dict:
        """Representation without the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key
    - short_code: Unique short code (4-8 characters, hashids encoded)
    - long_url: The absolute http/https URL that was shortened
    - created_at: Timestamp when URL was shortened
    - owner_id: User who created the mapping (None for anonymous rows)

    Rows are never updated; only their owner can delete them.
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    short_code: str = Field(
        sa_column=Column(String(10), nullable=False, unique=True, index=True),
        max_length=10
    )
    long_url: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False, index=True)
    )
    owner_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
            index=True
        )
    )
