"""
Pydantic schemas package.

This package contains all Pydantic schemas for request/response
validation and serialization.
"""

# Local application imports
from civic_issues.schemas.auth import AnonymousSessionResponse, CurrentUserResponse
from civic_issues.schemas.common import BaseResponse, ErrorDetails

__all__ = [
    # Auth schemas
    "AnonymousSessionResponse",
    "CurrentUserResponse",
    # Common schemas
    "BaseResponse",
    "ErrorDetails",
]
