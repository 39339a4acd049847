# Standard library imports
from enum import Enum

# Local application imports
from civic_issues.schemas.issues.issue_schemas import DocumentModel


class VoteOutcome(str, Enum):
    RECORDED = "recorded"
    ALREADY_VOTED = "already_voted"


class VoteResponse(DocumentModel):
    issue_id: str
    outcome: VoteOutcome
