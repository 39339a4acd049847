from .analytics_routes import router as analytics_router
from .issue_routes import router as issue_router
from .stream_routes import router as stream_router
from .vote_routes import router as vote_router

__all__ = ["analytics_router", "issue_router", "stream_router", "vote_router"]
