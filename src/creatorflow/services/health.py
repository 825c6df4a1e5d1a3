import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

log = logging.getLogger(__name__)


async def check_db(session: AsyncSession) -> bool:
    """True when the database answers a ``SELECT 1``."""
    try:
        await session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        log.warning("database readiness check failed", exc_info=True)
        return False
