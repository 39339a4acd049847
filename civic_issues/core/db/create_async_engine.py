# Third-party imports
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

# Local application imports
from civic_issues.settings import settings

# Seconds a SQLite connection waits for the write lock before failing
SQLITE_BUSY_TIMEOUT = 30


def _lock_sqlite_on_begin(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction take the write lock when it begins.

    SQLite ignores SELECT ... FOR UPDATE and the driver defers BEGIN until the
    first write, so two read-modify-write transactions could both read the
    same row. BEGIN IMMEDIATE serialises them instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def build_async_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine for the configured database (or the given URL)."""
    database_url = url or settings.SQLALCHEMY_ASYNC_DATABASE_URI
    is_sqlite = database_url.startswith("sqlite")

    engine = create_async_engine(
        database_url,
        echo=settings.SQL_ECHO if echo is None else echo,
        future=True,
        pool_pre_ping=not is_sqlite,
        connect_args={"timeout": SQLITE_BUSY_TIMEOUT} if is_sqlite else {},
    )
    if is_sqlite:
        _lock_sqlite_on_begin(engine)
    return engine
