"""
Tally Backend - Auth Service (Local Credential Provider)
========================================================

What:  Account creation and credential checks behind /auth/join and
       /auth/login.
How:   Passwords are hashed with PBKDF2-HMAC-SHA256 and a random 16-byte
       salt; verification uses a constant-time comparison.
Who:   Called by tally.routes.auth. The session cookie itself is managed by
       Starlette's SessionMiddleware; this service never touches it.

Stored hash format:
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tally.config import settings
from tally.core.validation import get_validation_error
from tally.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    TallyError,
)
from tally.models import User

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    iterations = iterations or settings.password_hash_iterations
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """True if `password` matches the stored hash. Malformed hashes never match."""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            bytes.fromhex(salt_hex),
            int(iterations),
        )
    except ValueError:
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


class AuthService:
    """
    Join and login for local accounts.

    Both methods validate the body first (400), then hit the database;
    SQLAlchemy failures are logged and re-raised as DatabaseError (500).
    """

    async def _find_by_username(self, db: AsyncSession, username: str):
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def join(
        self,
        db: AsyncSession,
        username: Optional[str],
        password: Optional[str],
        path: str = "",
    ) -> User:
        """
        Create a new account.

        Raises:
            ValidationError: username or password missing (→ 400)
            ConflictError: username already taken (→ 409)
        """
        error = get_validation_error({"username": username, "password": password}, path=path)
        if error:
            raise error

        try:
            if await self._find_by_username(db, username) is not None:
                raise ConflictError(
                    message=f"{path} username '{username}' is already taken".strip(),
                    context={"field": "username"},
                )

            user = User(username=username, password_hash=hash_password(password))
            db.add(user)
            await db.flush()
            logger.info("User joined: %s (id=%s)", user.username, user.id)
            return user

        except TallyError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error during join: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "join"}) from e

    async def authenticate(
        self,
        db: AsyncSession,
        username: Optional[str],
        password: Optional[str],
        path: str = "",
    ) -> User:
        """
        Check credentials and return the matching user.

        Raises:
            ValidationError: username or password missing (→ 400)
            AuthenticationError: unknown user or wrong password (→ 401)
        """
        error = get_validation_error({"username": username, "password": password}, path=path)
        if error:
            raise error

        try:
            user = await self._find_by_username(db, username)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"}) from e

        # Unknown user and wrong password share one message
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for username=%s", username)
            raise AuthenticationError(message="Invalid username or password")

        logger.info("User logged in: %s (id=%s)", user.username, user.id)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
