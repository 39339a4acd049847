"""
Pre-start script to check database connectivity before the API starts.
"""

# Standard library imports
import asyncio
import sys

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncEngine

# Local application imports
from civic_issues.core.db import build_async_engine, ping_database
from civic_issues.core.monitoring.logging import get_logger

logger = get_logger(__name__)


async def wait_for_database(engine: AsyncEngine, max_retries: int = 30, retry_interval: float = 2) -> bool:
    """
    Wait for database to be ready.

    Args:
        engine: Engine to check
        max_retries: Maximum number of connection attempts
        retry_interval: Seconds between retries

    Returns:
        True if database is ready, False otherwise
    """
    logger.info("Waiting for database to be ready...")

    for attempt in range(1, max_retries + 1):
        logger.info(f"Database connection attempt {attempt}/{max_retries}")

        if await ping_database(engine):
            logger.info("Database is ready")
            return True

        if attempt < max_retries:
            logger.info(f"Retrying in {retry_interval} seconds...")
            await asyncio.sleep(retry_interval)

    logger.error(f"Failed to connect to database after {max_retries} attempts")
    return False


async def main() -> None:
    """Main pre-start routine."""
    logger.info("Starting pre-start checks...")
    engine = build_async_engine(echo=False)
    try:
        ready = await wait_for_database(engine)
    finally:
        await engine.dispose()

    if not ready:
        logger.error("Pre-start checks failed: Database is not available")
        sys.exit(1)

    logger.info("All pre-start checks passed")


if __name__ == "__main__":
    asyncio.run(main())
