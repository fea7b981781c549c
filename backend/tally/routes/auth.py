"""
Tally Backend - Auth Route Handlers
====================================

What:  Join, login, logout and "who am I" over a signed session cookie.
How:   Starlette's SessionMiddleware (registered in main.py) signs the cookie;
       these handlers only read and write `request.session`.

Routes:
    POST /auth/join     → 201 {ok, data: identity} | 400 | 409
    POST /auth/login    → 200 {ok, data: identity} + session cookie | 400 | 401
    POST /auth/logout   → 204, session cleared | 401
    GET  /auth/me       → 200 {ok, data: identity} | 401
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tally.context import SESSION_USER_KEY, RequestContext, get_request_context
from tally.core.responses import get_success
from tally.database import get_db_session
from tally.schemas.auth import CredentialsPayload, IdentityOut
from tally.schemas.common import ErrorResponse, SuccessEnvelope
from tally.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/join",
    status_code=201,
    summary="Create an account",
    responses={
        201: {"model": SuccessEnvelope},
        400: {"description": "Missing username or password", "model": ErrorResponse},
        409: {"description": "Username already taken", "model": ErrorResponse},
    },
)
async def join(
    payload: CredentialsPayload,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    user = await auth_service.join(
        db, payload.username, payload.password, path=request.url.path
    )
    data = IdentityOut.model_validate(user).model_dump()
    return JSONResponse(status_code=201, content=get_success(data))


@router.post(
    "/login",
    summary="Open a session",
    responses={
        200: {"model": SuccessEnvelope},
        400: {"description": "Missing username or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
)
async def login(
    payload: CredentialsPayload,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    user = await auth_service.authenticate(
        db, payload.username, payload.password, path=request.url.path
    )
    # Drop whatever the previous session held before binding the new user
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    data = IdentityOut.model_validate(user).model_dump()
    return JSONResponse(status_code=200, content=get_success(data))


@router.post(
    "/logout",
    status_code=204,
    summary="Close the current session",
    responses={401: {"description": "Login is required", "model": ErrorResponse}},
)
async def logout(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> Response:
    request.session.clear()
    logger.info("[%s] User logged out: %s", ctx.request_id, ctx.identity.username)
    return Response(status_code=204)


@router.get(
    "/me",
    summary="Current identity",
    responses={
        200: {"model": SuccessEnvelope},
        401: {"description": "Login is required", "model": ErrorResponse},
    },
)
async def me(ctx: RequestContext = Depends(get_request_context)) -> JSONResponse:
    data = {"id": ctx.identity.id, "username": ctx.identity.username}
    return JSONResponse(status_code=200, content=get_success(data))
