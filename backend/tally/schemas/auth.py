"""
Tally Backend - Auth Schemas
=============================
"""

from typing import Optional

from pydantic import BaseModel, Field


class CredentialsPayload(BaseModel):
    """Body of POST /auth/join and POST /auth/login."""
    username: Optional[str] = Field(default=None, max_length=40)
    password: Optional[str] = Field(default=None, max_length=128)


class IdentityOut(BaseModel):
    """The authenticated user as returned to clients."""
    id: int
    username: str

    model_config = {"from_attributes": True}
