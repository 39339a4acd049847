# Local application imports
from civic_issues.services.auth.token_services import create_anonymous_session, verify_session_token

__all__ = ["create_anonymous_session", "verify_session_token"]
