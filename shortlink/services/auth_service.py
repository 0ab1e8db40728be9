"""
Authentication Service

Registers and verifies users and mints/verifies the session tokens carried in
the auth cookie.

Design Decisions:
- bcrypt password hashes (cost from BCRYPT_ROUNDS); hashing runs in a worker
  thread so the event loop keeps serving other requests
- Stateless sessions: HS256 JWTs with sub/email/role/iat/exp, no server-side store
- Unknown email and wrong password produce the same None result, and an
  unknown email still pays for one bcrypt comparison
"""

import asyncio
import functools
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.core.exceptions import AuthenticationError, DuplicateUserError
from shortlink.core.validators import MAX_PASSWORD_BYTES
from shortlink.db.models import User, UserRole

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with this email already exists"


class TokenPayload(BaseModel):
    """Claims carried by a session token."""
    sub: str
    email: str
    role: str
    iat: int
    exp: int

    @property
    def user_id(self) -> int:
        return int(self.sub)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


@functools.lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    # compared against when the email is unknown, so both paths cost one bcrypt check
    return hash_password("not-a-real-password", rounds)


class AuthService:
    """
    User registration, credential checks and session tokens.
    """

    def __init__(
        self,
        session: AsyncSession,
        jwt_secret: str,
        jwt_expires_minutes: int = 15,
        jwt_algorithm: str = "HS256",
        bcrypt_rounds: int = 12,
    ):
        if not jwt_secret:
            raise ValueError("JWT secret is required for AuthService")
        self.session = session
        self.jwt_secret = jwt_secret
        self.jwt_expires_minutes = jwt_expires_minutes
        self.jwt_algorithm = jwt_algorithm
        self.bcrypt_rounds = bcrypt_rounds

    async def get_user_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == normalize_email(email))
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def register_user(
        self, email: str, password: str, role: str = UserRole.user.value
    ) -> dict:
        """
        Create an account.

        Returns:
            The user without its password hash

        Raises:
            DuplicateUserError: If the normalized email is taken
        """
        normalized_email = normalize_email(email)
        role = UserRole(role).value

        if await self.get_user_by_email(normalized_email):
            raise DuplicateUserError(DUPLICATE_USER_MESSAGE)

        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
        user = User(email=normalized_email, password_hash=password_hash, role=role)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            await self.session.rollback()
            raise DuplicateUserError(DUPLICATE_USER_MESSAGE)

        logger.info(f"User registered: email={normalized_email} role={role}")
        return user.to_safe_dict()

    async def validate_user(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The user on a match, None for unknown email or wrong password
        """
        user = await self.get_user_by_email(email)
        if user is None:
            await asyncio.to_thread(check_password, password, _dummy_hash(self.bcrypt_rounds))
            return None

        if not await asyncio.to_thread(check_password, password, user.password_hash):
            return None

        return user

    def generate_token(self, user: User) -> str:
        if user.id is None:
            raise ValueError("User must have an id to generate a token")

        issued_at = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.jwt_expires_minutes),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def verify_token(self, token: str) -> TokenPayload:
        """
        Verify signature and expiry.

        Raises:
            AuthenticationError: For any invalid, tampered or expired token
        """
        try:
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
            payload = TokenPayload.model_validate(claims)
            if not payload.sub.isdigit():
                raise ValueError("token subject is not a user id")
        except (jwt.PyJWTError, ValueError) as e:
            logger.debug(f"Rejected session token: {e}")
            raise AuthenticationError()

        return payload
