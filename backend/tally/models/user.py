"""
Tally Backend - User SQLAlchemy Model
======================================

What:  Accounts that can open a session.
Who:   Used by AuthService for join/login and by the request-context
       dependency to resolve the identity stored in the session cookie.

Only a salted PBKDF2 hash of the password is stored (see
tally.services.auth_service).
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tally.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        unique=True,
        comment="Login name, unique across users",
    )

    # Format: pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
