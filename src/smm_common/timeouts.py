"""Deadline for balance-touching mutations.

A timed-out mutation has an unknown outcome (the COMMIT may have reached the
server), so it is surfaced as OutcomeUnknownError rather than a plain failure.

The deadline cancels the in-flight statement with CancelledError, which the
services' `except Exception` rollback blocks do not see, so the session passed
in here is rolled back before OutcomeUnknownError is raised.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.smm_common.errors import OutcomeUnknownError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def mutation_deadline(
    operation: str, db: AsyncSession | None = None, seconds: float | None = None
) -> AsyncIterator[None]:
    limit = settings.MUTATION_TIMEOUT_SECONDS if seconds is None else seconds
    try:
        async with asyncio.timeout(limit):
            yield
    except TimeoutError:
        logger.warning("%s exceeded its %.1fs deadline", operation, limit)
        if db is not None:
            try:
                await db.rollback()
            except SQLAlchemyError:
                # The session is still closed by get_db_session.
                logger.exception("Rollback after %s timeout failed", operation)
        raise OutcomeUnknownError(operation) from None
