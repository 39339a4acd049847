# Third-party imports
from fastapi import APIRouter

# Local application imports
from civic_issues.api.internal.routes.v1.auth import auth_router
from civic_issues.api.internal.routes.v1.issues import analytics_router, issue_router, stream_router, vote_router
from civic_issues.api.internal.routes.v1.weather import weather_router

router = APIRouter()

# Include all internal v1 routers
router.include_router(auth_router)
# Stream routes first so /issues/stream is never read as an issue id
router.include_router(stream_router)
router.include_router(issue_router)
router.include_router(vote_router)
router.include_router(analytics_router)
router.include_router(weather_router)
