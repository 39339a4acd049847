# Third-party imports
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

# Local application imports
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.models import Base

logger = get_logger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on Base"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def ping_database(engine: AsyncEngine) -> bool:
    """Check if the database is accessible"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database connection failed: {e}")
        return False
