# Third-party imports
from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import OAuth2PasswordBearer

# Local application imports
from civic_issues.services.auth.token_services import verify_session_token
from civic_issues.services.issues.lifecycle import IssueLifecycleController, TransitionPolicy
from civic_issues.services.issues.store import IssueStore
from civic_issues.services.weather.weather_client import WeatherClient
from civic_issues.settings import settings

# OAuth2PasswordBearer for token extraction
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/anonymous", auto_error=False)


async def get_current_user_id(token: str | None = Depends(oauth2_scheme)) -> str:
    """Get the anonymous session's user id from the bearer token"""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verify_session_token(token)


def get_issue_store(connection: HTTPConnection) -> IssueStore:
    return connection.app.state.issue_store


def get_lifecycle_controller(store: IssueStore = Depends(get_issue_store)) -> IssueLifecycleController:
    return IssueLifecycleController(store, TransitionPolicy(settings.STATUS_TRANSITIONS))


def get_weather_client(connection: HTTPConnection) -> WeatherClient:
    return connection.app.state.weather_client
