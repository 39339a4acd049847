# Standard library imports
from datetime import UTC, datetime, timedelta
from uuid import uuid4

# Third-party imports
from fastapi import HTTPException, status
import jwt

# Local application imports
from civic_issues.schemas.auth import AnonymousSessionResponse
from civic_issues.settings import settings

ANONYMOUS_TOKEN_TYPE = "anonymous"  # nosec B105


def create_anonymous_session(expires_delta: timedelta | None = None) -> AnonymousSessionResponse:
    """
    Start an anonymous session.

    The session's user id is a fresh opaque UUID that stays the same for as
    long as the client keeps the token.

    Args:
        expires_delta: Optional custom expiration time

    Returns:
        AnonymousSessionResponse with the signed token and the user id
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    user_id = str(uuid4())

    to_encode = {
        "sub": user_id,  # Standard JWT claim for subject
        "exp": expire,  # Expiration time
        "iat": now,  # Issued at time
        "token_type": ANONYMOUS_TOKEN_TYPE,
        "jti": str(uuid4()),  # JWT ID for tracking
    }

    token = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    return AnonymousSessionResponse(access_token=token, token_type="bearer", user_id=user_id, expires_at=expire)  # nosec B106


def verify_session_token(token: str) -> str:
    """
    Verify a session token and return its user id.

    Raises:
        HTTPException: If token is invalid or expired
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError:
        raise credentials_exception

    if payload.get("token_type") != ANONYMOUS_TOKEN_TYPE:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    return user_id
