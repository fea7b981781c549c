"""
Tally Backend - Request Context
================================

What:  The per-request value every protected handler receives: who is
       calling, the request correlation id, and the request path.
How:   `get_request_context` is a FastAPI dependency. It reads the user id
       from the signed session cookie (Starlette SessionMiddleware), loads
       the user, and returns a frozen RequestContext. Nothing is stored on
       a shared object; each request builds its own context.
When:  Resolved before the route body and any service call, so an
       unauthenticated request is rejected with 401 before business logic.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tally.core.lookups import find_existing
from tally.database import get_db_session
from tally.exceptions import AuthenticationError, DatabaseError
from tally.middleware.request_id import current_request_id
from tally.models import User

logger = logging.getLogger(__name__)

# Session key holding the authenticated user's id
SESSION_USER_KEY = "user_id"


@dataclass(frozen=True)
class Identity:
    id: int
    username: str


@dataclass(frozen=True)
class RequestContext:
    identity: Identity
    request_id: str
    path: str


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RequestContext:
    """
    Resolve the authenticated identity for this request.

    Raises:
        AuthenticationError: No session, or the session's user no longer
                             exists (→ 401)
        DatabaseError: The user lookup failed (→ 500)
    """
    rid = current_request_id(request)
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise AuthenticationError(context={"path": request.url.path})

    try:
        user = await find_existing(db, User, user_id)
    except SQLAlchemyError as e:
        logger.error("[%s] Session user lookup failed: %s", rid, str(e), exc_info=True)
        raise DatabaseError(context={"operation": "session_lookup"}) from e

    if user is None:
        # Stale cookie: the account was removed after login
        request.session.clear()
        raise AuthenticationError(context={"path": request.url.path})

    return RequestContext(
        identity=Identity(id=user.id, username=user.username),
        request_id=rid,
        path=request.url.path,
    )
