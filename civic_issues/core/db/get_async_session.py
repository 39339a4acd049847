# Third-party imports
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Asynchronous Session Factory bound to the given engine"""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
