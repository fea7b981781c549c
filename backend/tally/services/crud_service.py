"""
Tally Backend - Generic CRUD Service
=====================================

What:  One implementation of create / list / get / update / delete shared by
       every resource, parameterized by a ResourceDescriptor.
Who:   Called by the routers built in tally.routes.crud.
When:  For every resource request, after the session has been authenticated.

Request flow per operation:

    create  required fields present (400) → each foreign key exists (404)
            → insert
    list    each supplied filter id exists (404) → SELECT ... WHERE fk = :id
    get     row exists (404)
    update  row exists (404) → no explicit nulls (400) → no blank required
            values (400) → at least one field sent (400) → each sent foreign
            key exists (404) → diff-and-update
    delete  row exists (404) → delete

Error Handling Strategy:
    TallyError subclasses (ValidationError, NotFoundError) propagate as-is.
    SQLAlchemyError is logged with the stack trace and re-raised as
    DatabaseError, which the global handler maps to 500. Other exceptions
    propagate untouched to the catch-all handler.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tally.context import RequestContext
from tally.core.lookups import ensure_exists
from tally.core.partial import PartialUpdate
from tally.core.updates import update_for_each
from tally.core.validation import get_validation_error
from tally.database import Base
from tally.exceptions import DatabaseError, TallyError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Everything the generic service and router need to know about a resource.

    Attributes:
        name:            Singular name used in logs and route names ("record")
        prefix:          URL prefix ("/records")
        model:           SQLAlchemy model class
        payload:         Pydantic body for POST and PATCH (all fields Optional)
        output:          Pydantic output model (from_attributes)
        required_fields: Fields that must be present on create and may never
                         be set to null or blank on update
        foreign_keys:    Field name → referenced model; checked for existence
                         before writes and usable as list filters
        tag:             OpenAPI tag
    """

    name: str
    prefix: str
    model: Type[Base]
    payload: Type[BaseModel]
    output: Type[BaseModel]
    required_fields: Tuple[str, ...]
    foreign_keys: Mapping[str, Type[Base]] = field(default_factory=dict)
    tag: str = ""

    @property
    def updatable_fields(self) -> Tuple[str, ...]:
        return tuple(self.payload.model_fields)

    @property
    def filter_fields(self) -> Tuple[str, ...]:
        return tuple(self.foreign_keys)


class CrudService:
    """
    Business logic for one resource.

    Stateless apart from its descriptor; the session and request context
    are passed to every call.
    """

    def __init__(self, descriptor: ResourceDescriptor):
        self.descriptor = descriptor
        self.model = descriptor.model

    # ── Helpers ───────────────────────────────────────────────────────────

    @contextmanager
    def _store_errors(self, operation: str, ctx: RequestContext, **context: Any) -> Iterator[None]:
        """Translate SQLAlchemy failures inside the block into DatabaseError."""
        try:
            yield
        except TallyError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                "[%s] db error: %s %s (%s) %s",
                ctx.request_id,
                operation,
                self.descriptor.name,
                context,
                str(e),
                exc_info=True,
            )
            raise DatabaseError(
                context={
                    "operation": operation,
                    "resource": self.descriptor.name,
                    "original_error": type(e).__name__,
                    **context,
                },
            ) from e

    async def _check_foreign_keys(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        values: Mapping[str, Any],
    ) -> None:
        """Raise NotFoundError for the first foreign key whose row is missing."""
        for name, referenced in self.descriptor.foreign_keys.items():
            value = values.get(name)
            if value is None:
                continue
            await ensure_exists(db, referenced, value, field=name, path=ctx.path)

    def serialize(self, entity: Base) -> Dict[str, Any]:
        return self.descriptor.output.model_validate(entity).model_dump(mode="json")

    # ── Operations ────────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        payload: BaseModel,
    ) -> Base:
        """
        Insert a new row.

        Raises:
            ValidationError: A required field is missing or empty (→ 400)
            NotFoundError: A foreign key references a missing row (→ 404)
            DatabaseError: The insert failed (→ 500)
        """
        values = payload.model_dump()
        required = {name: values.get(name) for name in self.descriptor.required_fields}
        error = get_validation_error(required, path=ctx.path)
        if error:
            raise error

        with self._store_errors("create", ctx):
            await self._check_foreign_keys(db, ctx, values)

            entity = self.model(**values)
            db.add(entity)
            await db.flush()

        logger.info(
            "[%s] %s created %s id=%s",
            ctx.request_id,
            ctx.identity.username,
            self.descriptor.name,
            entity.id,
        )
        return entity

    async def list_all(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[Base]:
        """
        Fetch every row matching the equality filters, ordered by id.

        Only the descriptor's foreign-key fields are honored as filters, and
        each supplied id must exist.

        Raises:
            NotFoundError: A filter id references a missing row (→ 404)
        """
        condition = {
            name: value
            for name, value in (filters or {}).items()
            if name in self.descriptor.foreign_keys and value is not None
        }

        with self._store_errors("list", ctx, filters=condition):
            await self._check_foreign_keys(db, ctx, condition)

            query = select(self.model)
            for name, value in condition.items():
                query = query.where(getattr(self.model, name) == value)
            query = query.order_by(self.model.id)

            result = await db.execute(query)
            return list(result.scalars().all())

    async def get(self, db: AsyncSession, ctx: RequestContext, entity_id: int) -> Base:
        """
        Raises:
            NotFoundError: No row with that id (→ 404)
        """
        with self._store_errors("get", ctx, entity_id=entity_id):
            return await ensure_exists(db, self.model, entity_id, path=ctx.path)

    async def update(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        entity_id: int,
        payload: BaseModel,
    ) -> Tuple[Base, bool]:
        """
        Apply a partial update.

        Returns:
            (entity, changed) where `changed` is False for a no-op update.

        Raises:
            NotFoundError: No row with that id, or a sent foreign key
                           references a missing row (→ 404)
            ValidationError: A required field was sent as null or blank,
                             or no field was sent at all (→ 400)
        """
        update = PartialUpdate.from_model(payload, self.descriptor.updatable_fields)

        with self._store_errors("update", ctx, entity_id=entity_id):
            target = await ensure_exists(db, self.model, entity_id, path=ctx.path)

            nulled = update.null_fields(self.descriptor.required_fields)
            if nulled:
                raise ValidationError(
                    message=f"{ctx.path} {{{', '.join(nulled)}}} Not Null",
                    fields=nulled,
                    reason="null_field",
                )

            sent_required = {
                name: value.value
                for name, value in update.present()
                if name in self.descriptor.required_fields
            }
            error = get_validation_error(sent_required, path=ctx.path)
            if error:
                raise error

            if update.is_empty():
                raise ValidationError(
                    message=f"{ctx.path} At least one content is required",
                    fields=self.descriptor.updatable_fields,
                    reason="empty_update",
                )

            await self._check_foreign_keys(db, ctx, update.values())

            is_same = await update_for_each(db, target, update)

        if not is_same:
            logger.info(
                "[%s] %s updated %s id=%s",
                ctx.request_id,
                ctx.identity.username,
                self.descriptor.name,
                entity_id,
            )
        return target, not is_same

    async def delete(self, db: AsyncSession, ctx: RequestContext, entity_id: int) -> None:
        """
        Raises:
            NotFoundError: No row with that id (→ 404)
        """
        with self._store_errors("delete", ctx, entity_id=entity_id):
            target = await ensure_exists(db, self.model, entity_id, path=ctx.path)
            await db.delete(target)
            await db.flush()

        logger.info(
            "[%s] %s deleted %s id=%s",
            ctx.request_id,
            ctx.identity.username,
            self.descriptor.name,
            entity_id,
        )
