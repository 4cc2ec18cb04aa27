"""Usage tracking shared by the contact registries.

Every time a customer, end customer or contractor is picked for a document,
its usage_count goes up and last_used_at moves to now. This feeds the
"recently used" lists only, so failures are reported and never raised.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.services.errors import BestEffortResult

logger = logging.getLogger(__name__)


async def _increment_usage(db: AsyncSession, model: type[Any], record_id: UUID) -> int | None:
    """Atomically bump usage; returns the new count, None if the record is gone."""
    now = utcnow()
    result = await db.execute(
        update(model)
        .where(model.id == record_id)
        .values(
            usage_count=model.usage_count + 1,
            last_used_at=now,
            updated_at=now,
        )
        .returning(model.usage_count)
        .execution_options(synchronize_session="fetch")
    )
    return result.scalar_one_or_none()


async def record_usage(
    db: AsyncSession, model: type[Any], record_id: UUID
) -> BestEffortResult:
    """Record that a record was selected for use.

    Runs in a SAVEPOINT so a failure leaves the caller's transaction usable.
    """
    name = model.__name__
    try:
        async with db.begin_nested():
            usage_count = await _increment_usage(db, model, record_id)
    except SQLAlchemyError as e:
        logger.warning(f"Usage tracking failed for {name} {record_id}: {e}")
        return BestEffortResult.failed(f"Could not record usage for {name} {record_id}")

    if usage_count is None:
        logger.warning(f"Usage tracking skipped, {name} {record_id} not found")
        return BestEffortResult.failed(f"{name} {record_id} not found")

    logger.debug(f"Recorded usage for {name} {record_id}")
    return BestEffortResult.success()
