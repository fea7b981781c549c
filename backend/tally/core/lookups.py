"""
Tally Backend - Existence Checks
=================================

What:  Point lookups by primary key, used to validate ids and foreign keys.
How:   SELECT ... WHERE id = :id → scalar_one_or_none().

    find_existing()  returns the row or None
    ensure_exists()  returns the row or raises NotFoundError naming the field

SQLAlchemy errors are not caught here; the calling service wraps them.
"""

import logging
from typing import Any, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tally.database import Base
from tally.exceptions import NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


async def find_existing(
    db: AsyncSession,
    model: Type[ModelT],
    entity_id: Any,
) -> Optional[ModelT]:
    result = await db.execute(select(model).where(model.id == entity_id))
    return result.scalar_one_or_none()


async def ensure_exists(
    db: AsyncSession,
    model: Type[ModelT],
    entity_id: Any,
    field: Optional[str] = None,
    path: str = "",
) -> ModelT:
    """
    Look up `entity_id` and raise NotFoundError if it does not exist.

    Args:
        db:        Request session
        model:     ORM class to look in
        entity_id: Primary key value
        field:     Name of the request field that carried the id; included in
                   the message ("<path> <field>: <Model> with ID ... was not found")
        path:      Request path used as the message prefix

    Raises:
        NotFoundError: No row with that id (→ 404)
    """
    entity = await find_existing(db, model, entity_id)
    if entity is not None:
        return entity

    resource = model.__name__
    message = f"{resource} with ID '{entity_id}' was not found"
    if field:
        message = f"{field}: {message}"
    if path:
        message = f"{path} {message}"
    logger.info("Lookup miss: %s id=%s field=%s", resource, entity_id, field)
    raise NotFoundError(
        resource=resource,
        resource_id=entity_id,
        field=field,
        message=message,
    )
