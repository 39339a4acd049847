# Third-party imports
from fastapi import APIRouter, Depends, status

# Local application imports
from civic_issues.core.monitoring.logging import get_logger
from civic_issues.dependancies.common import get_current_user_id
from civic_issues.schemas.auth import AnonymousSessionResponse, CurrentUserResponse
from civic_issues.services.auth.token_services import create_anonymous_session

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/anonymous", response_model=AnonymousSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_anonymous_session():
    """Start an anonymous session and return its bearer token"""
    session = create_anonymous_session()
    logger.info(f"Anonymous session started for user {session.user_id}")
    return session


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(current_user_id: str = Depends(get_current_user_id)):
    """Return the caller's session user id"""
    return CurrentUserResponse(user_id=current_user_id)
