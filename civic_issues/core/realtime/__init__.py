# Local application imports
from civic_issues.core.realtime.change_feed import (
    ChangeFeed,
    ChangeListener,
    LocalChangeFeed,
    RedisChangeFeed,
    build_change_feed,
)

__all__ = ["ChangeFeed", "ChangeListener", "LocalChangeFeed", "RedisChangeFeed", "build_change_feed"]
