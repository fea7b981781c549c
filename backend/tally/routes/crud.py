"""
Tally Backend - CRUD Route Factory
===================================

What:  Builds the five routes of a resource from its ResourceDescriptor.
How:   Handlers parse the request, call CrudService, and pick the status code;
       every body is wrapped with get_success. Errors are raised by the
       service and rendered by the global exception handlers.
Who:   tally.main calls build_crud_router() once per entry in RESOURCES.

Routes (shown for /records):
    POST    /records        → 201 {ok, data} | 400 | 401 | 404 | 500
    GET     /records        → 200 {ok, data: [...]} | 204 (empty) | 404 (filter id)
    GET     /records/{id}   → 200 | 404
    PATCH   /records/{id}   → 201 (changed) | 204 (no-op) | 400 | 404
    DELETE  /records/{id}   → 204 | 404

Every handler depends on get_request_context, so a request without a valid
session gets 401 before the service is called.
"""

import logging
from typing import Annotated, Any, Optional, Type

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, BeforeValidator, create_model
from sqlalchemy.ext.asyncio import AsyncSession

from tally.context import RequestContext, get_request_context
from tally.core.responses import get_success
from tally.core.validation import is_empty
from tally.database import get_db_session
from tally.schemas.common import ErrorResponse, SuccessEnvelope
from tally.services.crud_service import CrudService, ResourceDescriptor

logger = logging.getLogger(__name__)

_ERRORS = {
    400: {"description": "Invalid request body or parameters", "model": ErrorResponse},
    401: {"description": "Login is required", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Resource or referenced id not found", "model": ErrorResponse}}


def blank_to_none(value: Any) -> Any:
    return None if is_empty(value) else value


# "?VariableId=" means no filter on VariableId
FilterId = Annotated[Optional[int], BeforeValidator(blank_to_none)]


def build_filter_model(descriptor: ResourceDescriptor) -> Type[BaseModel]:
    """
    Query-parameter model for the list route: one optional id per foreign
    key of the resource (e.g. ?VariableId=&DateRecordId=). Blank values
    are treated as absent.
    """
    fields = {name: (FilterId, None) for name in descriptor.filter_fields}
    class_name = "".join(part.capitalize() for part in descriptor.name.split("_"))
    return create_model(f"{class_name}Filters", **fields)


def build_crud_router(
    descriptor: ResourceDescriptor,
    service: Optional[CrudService] = None,
) -> APIRouter:
    service = service or CrudService(descriptor)
    payload_model = descriptor.payload
    filter_model = build_filter_model(descriptor)
    name = descriptor.name

    router = APIRouter(prefix=descriptor.prefix, tags=[descriptor.tag or name])

    @router.post(
        "",
        status_code=201,
        name=f"create_{name}",
        summary=f"Create a {name}",
        responses={201: {"model": SuccessEnvelope}, **_ERRORS, **_NOT_FOUND},
    )
    async def create_entity(
        payload: payload_model,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db_session),
    ) -> JSONResponse:
        entity = await service.create(db, ctx, payload)
        return JSONResponse(status_code=201, content=get_success(service.serialize(entity)))

    @router.get(
        "",
        name=f"list_{name}s",
        summary=f"List {name}s, optionally filtered by foreign key",
        responses={
            200: {"model": SuccessEnvelope},
            204: {"description": "No matching rows"},
            **_ERRORS,
            **_NOT_FOUND,
        },
    )
    async def list_entities(
        filters: filter_model = Depends(),
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        entities = await service.list_all(db, ctx, filters.model_dump())
        if not entities:
            return Response(status_code=204)
        return JSONResponse(
            status_code=200,
            content=get_success([service.serialize(entity) for entity in entities]),
        )

    @router.get(
        "/{entity_id}",
        name=f"get_{name}",
        summary=f"Get a {name} by id",
        responses={200: {"model": SuccessEnvelope}, **_ERRORS, **_NOT_FOUND},
    )
    async def get_entity(
        entity_id: int,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db_session),
    ) -> JSONResponse:
        entity = await service.get(db, ctx, entity_id)
        return JSONResponse(status_code=200, content=get_success(service.serialize(entity)))

    @router.patch(
        "/{entity_id}",
        name=f"update_{name}",
        summary=f"Partially update a {name}",
        description=(
            "Only fields that differ from the stored values are written. "
            "Answers 201 with the updated entity when something changed, "
            "204 when every sent value was already stored."
        ),
        responses={
            201: {"model": SuccessEnvelope},
            204: {"description": "Nothing changed"},
            **_ERRORS,
            **_NOT_FOUND,
        },
    )
    async def update_entity(
        entity_id: int,
        payload: payload_model,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        entity, changed = await service.update(db, ctx, entity_id, payload)
        if not changed:
            return Response(status_code=204)
        return JSONResponse(status_code=201, content=get_success(service.serialize(entity)))

    @router.delete(
        "/{entity_id}",
        status_code=204,
        name=f"delete_{name}",
        summary=f"Delete a {name}",
        responses={**_ERRORS, **_NOT_FOUND},
    )
    async def delete_entity(
        entity_id: int,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db_session),
    ) -> Response:
        await service.delete(db, ctx, entity_id)
        return Response(status_code=204)

    return router
