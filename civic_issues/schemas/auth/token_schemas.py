# Standard library imports
from datetime import datetime

# Third-party imports
from pydantic import BaseModel

# ============================
# ----- Response schemas -----
# ============================


class AnonymousSessionResponse(BaseModel):
    """Response model for anonymous session creation."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
    expires_at: datetime

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9",
                "token_type": "bearer",
                "user_id": "5f0c3c1e-8d57-4a4e-9a57-4a3b3cbd2a51",
                "expires_at": "2026-11-18T10:00:00Z",
            }
        }
    }


class CurrentUserResponse(BaseModel):
    """The opaque id of the caller's anonymous session."""

    user_id: str
