"""
Tally Backend - Diff-and-Update
================================

What:  Applies a PartialUpdate to a persisted row, touching only the fields
       whose value actually differs, and reports whether anything changed.
Who:   Called by CrudService.update after the route-level checks (target
       exists, no null foreign keys, payload not empty, foreign keys exist).

Outcomes for PATCH:
    nothing sent                → rejected by the caller (400), never reaches here
    every sent value equal      → no write, returns True  (route answers 204)
    at least one value differs  → one flush, returns False (route answers 201)
"""

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from tally.core.partial import PartialUpdate

logger = logging.getLogger(__name__)


def diff_fields(target: Any, update: PartialUpdate) -> Dict[str, Any]:
    """
    Fields of `update` whose value differs from the one stored on `target`.

    Absent fields are skipped; NULL and VALUE fields are compared by ==
    against getattr(target, name).
    """
    changes: Dict[str, Any] = {}
    for name, field_value in update.present():
        if getattr(target, name) != field_value.value:
            changes[name] = field_value.value
    return changes


async def update_for_each(
    db: AsyncSession,
    target: Any,
    update: PartialUpdate,
) -> bool:
    """
    Stage every changed field on `target` and flush once.

    Args:
        db:     Session that owns `target`
        target: Persisted ORM instance (current stored state)
        update: Three-state field values from the request

    Returns:
        True if no field differed (no-op, nothing written), False otherwise.
    """
    changes = diff_fields(target, update)
    if not changes:
        logger.debug("No-op update for %r", target)
        return True

    for name, value in changes.items():
        setattr(target, name, value)

    await db.flush()
    logger.info("Updated %r fields=%s", target, sorted(changes))
    return False
