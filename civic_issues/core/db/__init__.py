# Local application imports
from civic_issues.core.db.create_async_engine import build_async_engine
from civic_issues.core.db.get_async_session import build_session_factory
from civic_issues.core.db.init_db import create_tables, ping_database

__all__ = [
    "build_async_engine",
    "build_session_factory",
    "create_tables",
    "ping_database",
]
